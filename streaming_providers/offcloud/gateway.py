import logging
from os.path import basename
from typing import Optional
from urllib.parse import unquote, urlparse

from db.enums import DebridProvider, DetailsMode, MediaType
from db.schemas import Candidate
from streaming_providers.exceptions import ProviderException
from streaming_providers.gateway import ProviderGateway, SearchQuery, filter_by_score
from streaming_providers.offcloud.client import OffCloud
from streaming_providers.parser import is_video_file
from utils.const import DIRECT_LINK_MARKERS
from utils.matching import has_episode_marker

logger = logging.getLogger(__name__)


class OffCloudGateway(ProviderGateway):
    provider = DebridProvider.OFFCLOUD
    details_mode = DetailsMode.NONE
    client_class = OffCloud

    def _is_verified(self, file_name: str, query: SearchQuery) -> bool:
        content = query.content
        if content.type == MediaType.MOVIE:
            return True
        return has_episode_marker(file_name, content.season, content.episode)

    async def search(self, api_key: str, query: SearchQuery) -> list[Candidate]:
        candidates = []
        async with self.client(api_key) as oc_client:
            history = await oc_client.get_user_torrent_list()
            downloaded = [
                item
                for item in history or []
                if item.get("status") == "downloaded" and item.get("fileName")
            ]
            for item in filter_by_score(downloaded, query, name_key="fileName"):
                if not item.get("isDirectory"):
                    # a single downloaded file carrying the requested episode
                    # needs no further heuristic filtering
                    candidates.append(
                        self.make_candidate(
                            id=item["requestId"],
                            name=item["fileName"],
                            url=oc_client.build_download_link(item),
                            bypass_filtering=self._is_verified(item["fileName"], query),
                        )
                    )
                    continue

                try:
                    links = await oc_client.explore_folder_links(item["requestId"])
                except ProviderException as error:
                    logger.warning(
                        "Skipping OffCloud folder %s: %s", item["requestId"], error.message
                    )
                    continue
                for link in links:
                    file_name = unquote(basename(urlparse(link).path))
                    if not is_video_file(file_name):
                        continue
                    candidates.append(
                        self.make_candidate(
                            id=item["requestId"],
                            name=file_name,
                            searchable_name=item["fileName"],
                            url=link,
                        )
                    )
        return candidates

    async def _resolve_url(
        self,
        api_key: str,
        host_reference: str,
        client_ip: Optional[str],
        item_id: Optional[str],
    ) -> Optional[str]:
        if DIRECT_LINK_MARKERS[self.provider] in host_reference:
            return host_reference
        raise ProviderException(
            f"Not an OffCloud download link: {host_reference}", "invalid_reference"
        )
