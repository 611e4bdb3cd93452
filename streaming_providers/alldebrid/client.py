from typing import Optional

from streaming_providers.debrid_client import DebridClient
from streaming_providers.exceptions import ProviderException


class AllDebrid(DebridClient):
    provider_name = "AllDebrid"
    BASE_URL = "https://api.alldebrid.com/v4.1"
    AGENT = "debridfusion"

    async def _make_request(
        self, method: str, url: str, params: Optional[dict] = None, **kwargs
    ) -> dict:
        params = params or {}
        params["agent"] = self.AGENT
        if self.user_ip:
            params["ip"] = self.user_ip
        full_url = self.BASE_URL + url
        return await super()._make_request(
            method=method, url=full_url, params=params, **kwargs
        )

    @staticmethod
    def _validate_error_response(response_data):
        if response_data.get("status") != "success":
            error_code = response_data.get("error", {}).get("code")
            match error_code:
                case "AUTH_BAD_APIKEY":
                    raise ProviderException(
                        "Invalid AllDebrid API key", "invalid_token"
                    )
                case "AUTH_BLOCKED":
                    raise ProviderException(
                        "API got blocked on AllDebrid", "alldebrid_api_blocked"
                    )
                case "MAGNET_INVALID_ID":
                    raise ProviderException(
                        "Magnet not found on AllDebrid", "transfer_error"
                    )
                case _:
                    raise ProviderException(
                        f"AllDebrid request failed {response_data}",
                        "api_error",
                    )

    async def get_user_torrent_list(self, status: str = None):
        params = {}
        if status:
            params["status"] = status
        response = await self._make_request("GET", "/magnet/status", params=params)
        self._validate_error_response(response)
        magnets = response.get("data", {}).get("magnets") or []
        if isinstance(magnets, dict):
            return list(magnets.values())
        return magnets

    async def get_torrent_files(self, magnet_id):
        response = await self._make_request(
            "GET",
            "/magnet/files",
            params={"id[]": magnet_id},
        )
        self._validate_error_response(response)
        magnets = response.get("data", {}).get("magnets") or []
        if not magnets:
            raise ProviderException(
                f"No files found for AllDebrid magnet {magnet_id}", "transfer_error"
            )
        return magnets[0].get("files", [])

    async def create_download_link(self, link):
        response = await self._make_request(
            "GET",
            "/link/unlock",
            params={"link": link},
            is_expected_to_fail=True,
        )
        if response.get("status") == "success":
            return response
        raise ProviderException(
            f"Failed to create download link from AllDebrid {response}",
            "transfer_error",
        )
