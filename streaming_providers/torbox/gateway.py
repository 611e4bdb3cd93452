from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from db.enums import DebridProvider, DetailsMode
from db.schemas import Candidate
from streaming_providers.exceptions import ProviderException
from streaming_providers.gateway import (
    ProviderGateway,
    SearchQuery,
    build_file_entry,
    filter_by_score,
    largest_video_link,
)
from streaming_providers.torbox.client import Torbox


def build_download_reference(torrent_id, file_id) -> str:
    query = urlencode({"torrent_id": torrent_id, "file_id": file_id})
    return f"{Torbox.BASE_URL}/torrents/requestdl?{query}"


def parse_download_reference(
    host_reference: str, item_id: Optional[str] = None
) -> tuple[str, str]:
    params = parse_qs(urlparse(host_reference).query)
    torrent_id = (params.get("torrent_id") or [item_id])[0]
    file_id = (params.get("file_id") or [None])[0]
    if not torrent_id or file_id is None:
        raise ProviderException(
            f"Invalid TorBox reference: {host_reference}", "invalid_reference"
        )
    return torrent_id, file_id


class TorboxGateway(ProviderGateway):
    provider = DebridProvider.TORBOX
    details_mode = DetailsMode.NONE
    client_class = Torbox

    async def search(self, api_key: str, query: SearchQuery) -> list[Candidate]:
        async with self.client(api_key) as tb_client:
            torrents = await tb_client.get_user_torrent_list()

        ready = [
            torrent
            for torrent in torrents
            if torrent.get("download_present") or torrent.get("download_finished")
        ]
        candidates = []
        for torrent in filter_by_score(ready, query):
            files = [
                build_file_entry(
                    file["id"],
                    file.get("name") or file.get("short_name"),
                    file.get("size"),
                    build_download_reference(torrent["id"], file["id"]),
                )
                for file in torrent.get("files") or []
            ]
            url = largest_video_link(files)
            if not url:
                continue
            candidates.append(
                self.make_candidate(
                    id=str(torrent["id"]),
                    name=torrent.get("name"),
                    size=torrent.get("size"),
                    hash=torrent.get("hash"),
                    files=files,
                    url=url,
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
        torrent_id, file_id = parse_download_reference(host_reference, item_id)
        async with self.client(api_key, client_ip) as tb_client:
            response = await tb_client.create_download_link(torrent_id, file_id)
        return response["data"]
