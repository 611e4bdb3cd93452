import json
import logging
from binascii import Error as BinasciiError
from ipaddress import ip_address
from urllib.parse import unquote

from fastapi.requests import Request
from pydantic import ValidationError

from db.schemas import UserConfig
from utils import crypto

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str | None:
    """
    Extract the client's real IP address from the request headers or fallback to the client host.
    """
    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        # The first one is the original client's IP.
        return x_forwarded_for.split(",")[0].strip()
    x_real_ip = request.headers.get("X-Real-IP")
    if x_real_ip:
        return x_real_ip
    return request.client.host if request.client else "127.0.0.1"


def is_private_ip(ip_str: str) -> bool:
    try:
        ip = ip_address(ip_str)
        return ip.is_private
    except ValueError:
        return False


def get_user_public_ip(request: Request) -> str | None:
    user_ip = get_client_ip(request)
    if user_ip and is_private_ip(user_ip):
        # Let the provider use the host public IP address.
        return None
    return user_ip


def decode_user_config(user_config: str) -> UserConfig:
    """
    Decode the configuration segment of an addon URL.

    Both URL-safe base64 JSON and plain URL-encoded JSON are accepted.
    Raises ``ValueError`` when neither decodes into a valid configuration.
    """
    raw_config = unquote(user_config).strip()
    if not raw_config.startswith("{"):
        try:
            raw_config = crypto.from_urlsafe(raw_config).decode("utf-8")
        except (BinasciiError, UnicodeError, ValueError) as error:
            raise ValueError(f"Invalid user config encoding: {error}") from error

    try:
        return UserConfig.model_validate(json.loads(raw_config))
    except (json.JSONDecodeError, ValidationError) as error:
        logger.warning("Failed to decode user config: %s", error)
        raise ValueError(f"Invalid user config: {error}") from error
