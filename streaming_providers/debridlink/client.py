from typing import Any

from streaming_providers.debrid_client import DebridClient
from streaming_providers.exceptions import ProviderException


class DebridLink(DebridClient):
    provider_name = "Debrid-Link"
    BASE_URL = "https://debrid-link.com/api/v2"

    @staticmethod
    def _handle_error_message(error_message):
        match error_message:
            case "freeServerOverload":
                raise ProviderException(
                    "Debrid-Link free servers are overloaded", "need_premium"
                )
            case "badToken" | "expired_token":
                raise ProviderException("Invalid token", "invalid_token")
            case "server_error" | "notDebrid":
                raise ProviderException(
                    "Debrid-Link server error", "debrid_service_down"
                )
            case "maxLink" | "maxLinkHost" | "maxData" | "maxDataHost" | "maxTorrent":
                raise ProviderException(
                    "Debrid-Link daily limit reached", "daily_download_limit"
                )
            case "disabledServerHost":
                raise ProviderException(
                    "Debrid-Link Server / VPN are not allowed on this host",
                    "ip_not_allowed",
                )

    async def _handle_service_specific_errors(self, error_data: dict, status_code: int):
        self._handle_error_message(error_data.get("error"))

    async def get_user_torrent_list(self) -> list[dict[str, Any]]:
        response = await self._make_request(
            "GET", f"{self.BASE_URL}/seedbox/list", params={"perPage": 50}
        )
        if "error" in response:
            self._handle_error_message(response.get("error"))
            raise ProviderException(
                "Failed to get torrent list from Debrid-Link", "transfer_error"
            )
        return response.get("value", [])

    async def get_torrents_info(self, torrent_ids: list[str]) -> list[dict[str, Any]]:
        response = await self._make_request(
            "GET",
            f"{self.BASE_URL}/seedbox/list",
            params={"ids": ",".join(torrent_ids)},
        )
        if "error" in response:
            self._handle_error_message(response.get("error"))
            raise ProviderException(
                "Failed to get torrent info from Debrid-Link", "transfer_error"
            )
        return response.get("value", [])
