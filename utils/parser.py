import logging
import math
from typing import Optional
from urllib.parse import quote

from db.config import settings
from db.enums import MediaType
from db.schemas import Candidate, Stream, StreamBehaviorHints, UserConfig
from streaming_providers.host_reference import is_valid_host_reference
from utils import const
from utils.const import STREAMING_PROVIDERS_SHORT_NAMES

logger = logging.getLogger(__name__)


def convert_bytes_to_readable(size_bytes: int) -> str:
    """
    Convert a size in bytes into a more human-readable format.
    """
    if not size_bytes:
        return "Unknown"
    size_name = ("B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
    i = int(math.floor(math.log(size_bytes, 1024)))
    p = math.pow(1024, i)
    s = round(size_bytes / p, 2)
    return f"{s} {size_name[i]}"


def should_use_archive_name(video_name: Optional[str], archive_name: Optional[str]) -> bool:
    """Whether ``video_name`` lacks every release marker and the archive name should be shown."""
    if not video_name or not archive_name:
        return False
    return not any(
        pattern.search(video_name) for pattern in const.MEANINGFUL_NAME_PATTERNS
    )


def get_display_name(candidate: Candidate) -> str:
    display_name = candidate.name or candidate.title or "Unknown"
    if candidate.searchable_name and should_use_archive_name(
        candidate.name, candidate.searchable_name
    ):
        display_name = candidate.searchable_name.split(" ")[0] or candidate.name
    return display_name


def get_stream_name(candidate: Candidate) -> str:
    short_name = STREAMING_PROVIDERS_SHORT_NAMES.get(candidate.provider, "DS")
    return (
        f"[{short_name}+] {settings.addon_name}\n"
        f"{candidate.info.resolution or 'N/A'}"
    )


def is_direct_link(candidate: Candidate) -> bool:
    marker = const.DIRECT_LINK_MARKERS.get(candidate.provider)
    return bool(marker and marker in candidate.url)


def build_stream_url(candidate: Candidate, user_config: UserConfig) -> str:
    if is_direct_link(candidate) or const.RESOLVE_PATH_SEGMENT in candidate.url:
        return candidate.url

    base = settings.host_url or ""
    if not base.startswith("http"):
        return candidate.url

    encoded_api_key = quote(user_config.proxy_api_key, safe="")
    encoded_url = quote(candidate.url, safe="")
    return (
        f"{base.rstrip('/')}{const.RESOLVE_PATH_SEGMENT}"
        f"{candidate.provider}/{encoded_api_key}/{encoded_url}"
    )


def to_stream(
    candidate: Candidate, content_type: str, user_config: UserConfig
) -> Optional[Stream]:
    """Build the Stremio stream of a ready candidate, or None without a usable URL."""
    if not is_valid_host_reference(candidate.url):
        return None

    display_name = get_display_name(candidate)
    title = ("[Cloud] " if candidate.is_personal else "") + display_name
    if (
        content_type == MediaType.SERIES
        and candidate.name
        and candidate.name != display_name
    ):
        title += f"\n{candidate.name}"

    icon = "☁️" if candidate.is_personal else "💾"
    tracker_info = f" | {candidate.tracker}" if candidate.tracker else ""
    title += f"\n{icon} {convert_bytes_to_readable(candidate.size)}{tracker_info}"

    return Stream(
        name=get_stream_name(candidate),
        title=title,
        url=build_stream_url(candidate, user_config),
        behaviorHints=StreamBehaviorHints(
            bingeGroup=f"{candidate.provider}|{candidate.hash or candidate.id or 'unknown'}"
        ),
        bypassFiltering=True if candidate.bypass_filtering else None,
    )
