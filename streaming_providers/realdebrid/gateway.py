import asyncio
import logging
from typing import Optional

from db.enums import DebridProvider, DetailsMode, MediaType
from db.schemas import Candidate, EpisodeHint
from streaming_providers.exceptions import ProviderException
from streaming_providers.gateway import (
    ProviderGateway,
    SearchQuery,
    build_file_entry,
    filter_by_score,
)
from streaming_providers.host_reference import (
    build_magnet_link,
    encode_host_reference,
    is_magnet_reference,
)
from streaming_providers.magnet_resolver import MagnetResolveWorkflow, ResolveState
from streaming_providers.realdebrid.client import RealDebrid
from utils.matching import find_episode_file

logger = logging.getLogger(__name__)


class RealDebridGateway(ProviderGateway):
    provider = DebridProvider.REALDEBRID
    details_mode = DetailsMode.NONE
    client_class = RealDebrid

    async def _fetch_files(self, rd_client: RealDebrid, torrent: dict) -> list:
        try:
            torrent_info = await rd_client.get_torrent_info(torrent["id"])
        except ProviderException as error:
            logger.warning(
                "Failed to list files of Real-Debrid torrent %s: %s",
                torrent.get("id"),
                error.message,
            )
            return []
        return [
            build_file_entry(
                file.get("id"),
                file.get("path"),
                file.get("bytes"),
                selected=bool(file.get("selected")),
            )
            for file in torrent_info.get("files") or []
        ]

    def _make_torrent_candidate(
        self, torrent: dict, query: SearchQuery, files: list
    ) -> Candidate:
        magnet_link = build_magnet_link(torrent["hash"], torrent.get("filename"))
        candidate = self.make_candidate(
            id=torrent.get("id"),
            name=torrent.get("filename"),
            size=torrent.get("bytes"),
            hash=torrent["hash"].lower(),
            files=files,
        )
        content = query.content
        if content.type != MediaType.SERIES:
            return candidate.model_copy(update={"url": magnet_link})

        hint = EpisodeHint(season=content.season, episode=content.episode)
        update = {}
        episode_file = find_episode_file(candidate, content.season, content.episode)
        if episode_file is not None:
            # pin the file so resolution picks it out of a season pack
            hint = hint.model_copy(
                update={"file_id": episode_file.id, "file_path": episode_file.path}
            )
            update["size"] = episode_file.size or candidate.size
        update["url"] = encode_host_reference(magnet_link, hint)
        return candidate.model_copy(update=update)

    async def search(self, api_key: str, query: SearchQuery) -> list[Candidate]:
        is_series = query.content.type == MediaType.SERIES
        async with self.client(api_key) as rd_client:
            torrents = await rd_client.get_user_torrent_list()
            downloaded = [
                torrent
                for torrent in torrents or []
                if torrent.get("status") == "downloaded" and torrent.get("hash")
            ]
            matched = filter_by_score(downloaded, query, name_key="filename")
            if is_series:
                file_lists = await asyncio.gather(
                    *(self._fetch_files(rd_client, torrent) for torrent in matched)
                )
            else:
                file_lists = [[] for _ in matched]

        return [
            self._make_torrent_candidate(torrent, query, files)
            for torrent, files in zip(matched, file_lists)
        ]

    async def _resolve_url(
        self,
        api_key: str,
        host_reference: str,
        client_ip: Optional[str],
        item_id: Optional[str],
    ) -> Optional[str]:
        async with self.client(api_key, client_ip) as rd_client:
            if is_magnet_reference(host_reference):
                state = ResolveState(
                    provider=self.provider,
                    api_key=api_key,
                    host_reference=host_reference,
                    client_ip=client_ip,
                )
                return await MagnetResolveWorkflow(rd_client, state).run()

            response = await rd_client.create_download_link(host_reference)
            return response.get("download")
