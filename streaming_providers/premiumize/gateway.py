from os.path import basename

from db.enums import DebridProvider, DetailsMode
from db.schemas import Candidate
from streaming_providers.gateway import ProviderGateway, SearchQuery, filter_by_score
from streaming_providers.parser import is_video_file
from streaming_providers.premiumize.client import Premiumize


class PremiumizeGateway(ProviderGateway):
    provider = DebridProvider.PREMIUMIZE
    details_mode = DetailsMode.PER_CANDIDATE
    client_class = Premiumize

    async def search(self, api_key: str, query: SearchQuery) -> list[Candidate]:
        async with self.client(api_key) as pm_client:
            files = await pm_client.get_user_torrent_list()

        video_files = [file for file in files if is_video_file(file.get("name"))]
        return [
            self.make_candidate(
                id=file["id"],
                name=file.get("name"),
                path=file.get("path"),
                size=file.get("size"),
            )
            for file in filter_by_score(video_files, query)
        ]

    async def get_details(
        self, api_key: str, candidate_ids: list[str]
    ) -> list[Candidate]:
        details = []
        async with self.client(api_key) as pm_client:
            for item_id in candidate_ids:
                item = await pm_client.get_item_details(item_id)
                name = item.get("name") or basename(item.get("path") or "") or None
                details.append(
                    self.make_candidate(
                        id=item.get("id", item_id),
                        name=name,
                        size=item.get("size"),
                        url=item.get("link") or item.get("stream_link"),
                    )
                )
        return details
