"""Host reference encoding.

A magnet-like host reference may carry an episode hint:
``magnet:?xt=urn:btih:<hash>||HINT||<base64 JSON EpisodeHint>``.
"""

import json
import logging
from base64 import b64decode, b64encode
from binascii import Error as BinasciiError
from urllib.parse import quote

from pydantic import ValidationError

from db.schemas import EpisodeHint
from utils.const import HINT_DELIMITER

logger = logging.getLogger(__name__)


def is_valid_host_reference(url: str | None) -> bool:
    return (
        isinstance(url, str)
        and url not in ("undefined", "null")
        and url.startswith(("http://", "https://", "magnet:"))
    )


def is_magnet_reference(host_reference: str) -> bool:
    return host_reference.startswith("magnet:") or HINT_DELIMITER in host_reference


def build_magnet_link(info_hash: str, name: str | None = None) -> str:
    magnet_link = f"magnet:?xt=urn:btih:{info_hash}"
    if name:
        magnet_link += f"&dn={quote(name)}"
    return magnet_link


def encode_host_reference(magnet_link: str, hint: EpisodeHint | None) -> str:
    if hint is None:
        return magnet_link
    payload = hint.model_dump_json(by_alias=True, exclude_none=True)
    return f"{magnet_link}{HINT_DELIMITER}{b64encode(payload.encode()).decode()}"


def split_host_reference(host_reference: str) -> tuple[str, EpisodeHint | None]:
    """Return the magnet link and the decoded hint, if any.

    The given reference is left untouched. A malformed hint payload is
    reported as no hint.
    """
    if HINT_DELIMITER not in host_reference:
        return host_reference, None

    magnet_link, _, payload = host_reference.partition(HINT_DELIMITER)
    try:
        hint_data = json.loads(b64decode(payload, validate=True).decode("utf-8"))
        return magnet_link, EpisodeHint.model_validate(hint_data)
    except (BinasciiError, UnicodeDecodeError, ValueError, ValidationError) as error:
        logger.warning("Ignoring malformed episode hint %r: %s", payload, error)
        return magnet_link, None
