from typing import Optional

from streaming_providers.debrid_client import DebridClient
from streaming_providers.exceptions import ProviderException


class Premiumize(DebridClient):
    provider_name = "Premiumize"
    BASE_URL = "https://www.premiumize.me/api"

    async def initialize_headers(self):
        pass

    async def _make_request(
        self, method: str, url: str, params: Optional[dict] = None, **kwargs
    ) -> dict:
        params = params or {}
        params["apikey"] = self.token
        return await super()._make_request(
            method=method, url=self.BASE_URL + url, params=params, **kwargs
        )

    @staticmethod
    def _validate_response(response: dict, action: str) -> dict:
        if response.get("status") != "success":
            if response.get("message") == "Not logged in.":
                raise ProviderException(
                    "Premiumize is not logged in.", "invalid_token"
                )
            raise ProviderException(
                f"Failed to {action} from Premiumize: {response.get('message')}",
                "transfer_error",
            )
        return response

    async def get_user_torrent_list(self) -> list[dict]:
        response = await self._make_request("GET", "/item/listall")
        return self._validate_response(response, "list cloud files").get("files", [])

    async def get_item_details(self, item_id: str) -> dict:
        response = await self._make_request(
            "GET", "/item/details", params={"id": item_id}
        )
        if "id" not in response:
            self._validate_response(response, "get item details")
        return response
