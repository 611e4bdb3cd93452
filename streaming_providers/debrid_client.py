import asyncio
import logging
from abc import abstractmethod
from contextlib import AsyncContextDecorator
from typing import ClassVar, Dict, Optional, Union

import aiohttp
from aiohttp import ClientResponse, ClientTimeout, ContentTypeError

from db.config import settings
from streaming_providers.exceptions import ProviderException

logger = logging.getLogger(__name__)

SERVICE_DOWN_STATUSES = frozenset({502, 503, 504})
CONNECT_RETRIES = 1


class DebridClient(AsyncContextDecorator):
    """
    Base aiohttp client of a debrid backend.

    Used as ``async with Client(token=..., user_ip=...) as client``; the session
    is opened lazily and closed on exit. Every failure surfaces as a
    ProviderException carrying a machine readable ``reason``.
    """

    provider_name: ClassVar[str] = "Debrid service"

    def __init__(self, token: Optional[str] = None, user_ip: Optional[str] = None):
        self.token = token
        self.user_ip = user_ip
        self.headers: Dict[str, str] = {}
        self._session: Optional[aiohttp.ClientSession] = None
        self._timeout = ClientTimeout(total=settings.provider_request_timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                connector=aiohttp.TCPConnector(ttl_dns_cache=300),
            )
        return self._session

    async def __aenter__(self):
        try:
            await self.initialize_headers()
        except ProviderException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    async def _make_request(
        self,
        method: str,
        url: str,
        data: Optional[dict | str] = None,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        is_return_none: bool = False,
        is_expected_to_fail: bool = False,
    ) -> dict | list | str:
        attempt = 0
        while True:
            try:
                async with self.session.request(
                    method,
                    url,
                    data=data,
                    json=json,
                    params=params,
                    headers=self.headers,
                ) as response:
                    await self._check_response_status(response, is_expected_to_fail)
                    return await self._parse_response(
                        response, is_return_none, is_expected_to_fail
                    )
            except aiohttp.ClientConnectorError as error:
                if attempt < CONNECT_RETRIES:
                    attempt += 1
                    logger.warning(
                        "Connection to %s failed, retrying: %s", self.provider_name, error
                    )
                    continue
                raise ProviderException(
                    f"Failed to connect to {self.provider_name}.",
                    "debrid_service_down",
                ) from error
            except aiohttp.ClientError as error:
                raise ProviderException(
                    f"{self.provider_name} request error: {error}", "api_error"
                ) from error
            except asyncio.TimeoutError as error:
                raise ProviderException(
                    f"{self.provider_name} request timed out.", "request_timeout"
                ) from error

    async def _check_response_status(
        self, response: ClientResponse, is_expected_to_fail: bool
    ):
        """Map HTTP errors to ProviderException reasons."""
        if response.ok:
            return
        if response.status in SERVICE_DOWN_STATUSES:
            raise ProviderException(
                f"{self.provider_name} is down.", "debrid_service_down"
            )
        if is_expected_to_fail:
            return

        if response.content_type == "application/json":
            error_content = await response.json()
            await self._handle_service_specific_errors(error_content, response.status)
        else:
            error_content = await response.text()

        if response.status == 401:
            raise ProviderException("Invalid token", "invalid_token")
        if response.status == 429:
            raise ProviderException(
                f"{self.provider_name} rate limit reached.", "too_many_requests"
            )
        raise ProviderException(
            f"{self.provider_name} API error {response.status}: {error_content}",
            "api_error",
        )

    async def _handle_service_specific_errors(self, error_data: dict, status_code: int):
        """
        Service specific errors on api requests.
        """

    async def _parse_response(
        self, response: ClientResponse, is_return_none: bool, is_expected_to_fail: bool
    ) -> Union[dict, list, str]:
        if is_return_none:
            return {}
        try:
            return await response.json()
        except (ValueError, ContentTypeError) as error:
            response_text = await response.text()
            if is_expected_to_fail:
                return response_text
            raise ProviderException(
                f"Failed to parse {self.provider_name} response: {error}. "
                f"response: {response_text}",
                "api_error",
            )

    async def initialize_headers(self):
        if self.token:
            self.headers = {"Authorization": f"Bearer {self.token}"}

    @abstractmethod
    async def get_user_torrent_list(self) -> dict | list:
        raise NotImplementedError
