from db.enums import DebridProvider, DetailsMode
from db.schemas import Candidate
from streaming_providers.debridlink.client import DebridLink
from streaming_providers.gateway import (
    ProviderGateway,
    SearchQuery,
    build_file_entry,
    filter_by_score,
    largest_video_link,
)


class DebridLinkGateway(ProviderGateway):
    provider = DebridProvider.DEBRIDLINK
    details_mode = DetailsMode.BATCH
    client_class = DebridLink

    async def search(self, api_key: str, query: SearchQuery) -> list[Candidate]:
        async with self.client(api_key) as dl_client:
            torrents = await dl_client.get_user_torrent_list()

        return [
            self.make_candidate(
                id=torrent["id"],
                name=torrent.get("name"),
                size=torrent.get("totalSize") or torrent.get("size"),
                hash=(torrent.get("hashString") or "").lower() or None,
            )
            for torrent in filter_by_score(torrents, query)
        ]

    async def get_details(
        self, api_key: str, candidate_ids: list[str]
    ) -> list[Candidate]:
        if not candidate_ids:
            return []
        async with self.client(api_key) as dl_client:
            torrents = await dl_client.get_torrents_info(candidate_ids)

        details = []
        for torrent in torrents:
            files = [
                build_file_entry(
                    file.get("id"),
                    file.get("name"),
                    file.get("size"),
                    file.get("downloadUrl"),
                )
                for file in torrent.get("files", [])
                if file.get("downloadPercent", 100) == 100
            ]
            details.append(
                self.make_candidate(
                    id=torrent["id"],
                    name=torrent.get("name"),
                    size=torrent.get("totalSize") or torrent.get("size"),
                    hash=(torrent.get("hashString") or "").lower() or None,
                    files=files,
                    url=largest_video_link(files),
                )
            )
        return details
