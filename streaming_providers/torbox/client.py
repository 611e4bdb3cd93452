from typing import Optional

from streaming_providers.debrid_client import DebridClient
from streaming_providers.exceptions import ProviderException


class Torbox(DebridClient):
    provider_name = "TorBox"
    BASE_URL = "https://api.torbox.app/v1/api"

    async def _make_request(
        self,
        method: str,
        url: str,
        data: Optional[dict | str] = None,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        is_return_none: bool = False,
        is_expected_to_fail: bool = False,
    ) -> dict:
        params = params or {}
        url = self.BASE_URL + url
        return await super()._make_request(
            method, url, data, json, params, is_return_none, is_expected_to_fail
        )

    async def get_user_torrent_list(self):
        response = await self._make_request(
            "GET", "/torrents/mylist", params={"bypass_cache": "true"}
        )
        return response.get("data") or []

    async def create_download_link(self, torrent_id, file_id):
        params = {"token": self.token, "torrent_id": torrent_id, "file_id": file_id}
        if self.user_ip:
            params["user_ip"] = self.user_ip
        response = await self._make_request(
            "GET",
            "/torrents/requestdl",
            params=params,
            is_expected_to_fail=True,
        )
        if response.get("success") and response.get("data"):
            return response
        raise ProviderException(
            f"Failed to create download link from Torbox {response}",
            "transfer_error",
        )
