from typing import Optional, List

from streaming_providers.debrid_client import DebridClient
from streaming_providers.exceptions import ProviderException


class OffCloud(DebridClient):
    provider_name = "OffCloud"
    BASE_URL = "https://offcloud.com"

    async def initialize_headers(self):
        pass

    async def _handle_service_specific_errors(self, error_data: dict, status_code: int):
        if status_code == 403:
            raise ProviderException("Invalid OffCloud API key", "invalid_token")
        if status_code == 429:
            raise ProviderException(
                "OffCloud rate limit exceeded", "too_many_requests"
            )

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[dict] = None,
        **kwargs,
    ) -> dict | list:
        params = params or {}
        params["key"] = self.token
        full_url = self.BASE_URL + url
        return await super()._make_request(
            method=method, url=full_url, params=params, **kwargs
        )

    async def get_user_torrent_list(self) -> List[dict]:
        response = await self._make_request("GET", "/api/cloud/history")
        if not isinstance(response, list):
            error = response.get("error") if isinstance(response, dict) else response
            raise ProviderException(
                f"Failed to fetch OffCloud history: {error}", "api_error"
            )
        return response

    async def explore_folder_links(self, request_id: str) -> List[str]:
        response = await self._make_request("GET", f"/api/cloud/explore/{request_id}")
        if isinstance(response, dict) and "error" in response:
            raise ProviderException(
                f"Failed to explore OffCloud folder {request_id}: {response['error']}",
                "transfer_error",
            )
        return response

    def build_download_link(self, torrent_info: dict) -> str:
        return (
            f"https://{torrent_info['server']}.offcloud.com/cloud/download/"
            f"{torrent_info['requestId']}/{torrent_info['fileName']}"
        )
