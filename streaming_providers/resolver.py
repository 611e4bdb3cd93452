import asyncio
import logging
from typing import Optional

from db.config import settings
from streaming_providers import mapper
from streaming_providers.exceptions import UnsupportedProviderError
from streaming_providers.host_reference import is_valid_host_reference

logger = logging.getLogger(__name__)


async def resolve_url(
    provider: str,
    api_key: str,
    item_id: Optional[str],
    host_reference: str,
    client_ip: Optional[str] = None,
) -> Optional[str]:
    """
    Turn a host reference into a playable URL.

    Never raises: invalid input, unknown providers, timeouts and backend
    failures are logged and reported as ``None``.
    """
    if not is_valid_host_reference(host_reference):
        logger.error("Invalid host reference provided: %s", host_reference)
        return None

    try:
        gateway = mapper.get_provider_gateway(provider)
    except UnsupportedProviderError as error:
        logger.error(error.message)
        return None

    try:
        return await asyncio.wait_for(
            gateway.resolve_url(
                api_key, host_reference, client_ip=client_ip, item_id=item_id
            ),
            timeout=settings.resolve_timeout,
        )
    except asyncio.TimeoutError:
        logger.error(
            "Resolving %s reference timed out after %ss",
            provider,
            settings.resolve_timeout,
        )
        return None
    except Exception as error:
        logger.exception("Critical error resolving %s reference: %s", provider, error)
        return None
