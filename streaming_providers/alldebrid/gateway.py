from typing import Optional

from db.enums import DebridProvider, DetailsMode
from db.schemas import Candidate, FileEntry
from streaming_providers.alldebrid.client import AllDebrid
from streaming_providers.gateway import (
    ProviderGateway,
    SearchQuery,
    build_file_entry,
    filter_by_score,
    largest_video_link,
)


def flatten_magnet_files(files: list[dict], parent: str = "") -> list[FileEntry]:
    """Flatten AllDebrid's nested ``n``/``e`` file tree into file entries."""
    entries = []
    for file in files:
        path = f"{parent}/{file['n']}" if parent else file["n"]
        if "e" in file:
            entries.extend(flatten_magnet_files(file["e"], path))
        else:
            entries.append(
                build_file_entry(path, path, file.get("s"), file.get("l"))
            )
    return entries


class AllDebridGateway(ProviderGateway):
    provider = DebridProvider.ALLDEBRID
    details_mode = DetailsMode.PER_CANDIDATE
    client_class = AllDebrid

    async def search(self, api_key: str, query: SearchQuery) -> list[Candidate]:
        async with self.client(api_key) as ad_client:
            magnets = await ad_client.get_user_torrent_list(status="ready")

        return [
            self.make_candidate(
                id=str(magnet["id"]),
                name=magnet.get("filename"),
                size=magnet.get("size"),
                hash=magnet.get("hash"),
            )
            for magnet in filter_by_score(magnets, query, name_key="filename")
        ]

    async def get_details(
        self, api_key: str, candidate_ids: list[str]
    ) -> list[Candidate]:
        details = []
        async with self.client(api_key) as ad_client:
            for magnet_id in candidate_ids:
                files = flatten_magnet_files(
                    await ad_client.get_torrent_files(magnet_id)
                )
                details.append(
                    Candidate(
                        provider=self.provider,
                        id=magnet_id,
                        files=files,
                        url=largest_video_link(files),
                    )
                )
        return details

    async def _resolve_url(
        self,
        api_key: str,
        host_reference: str,
        client_ip: Optional[str],
        item_id: Optional[str],
    ) -> Optional[str]:
        async with self.client(api_key, client_ip) as ad_client:
            response = await ad_client.create_download_link(host_reference)
        return response.get("data", {}).get("link")
