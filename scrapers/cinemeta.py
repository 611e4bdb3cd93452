import logging
import re
from typing import Optional

import httpx

from db.config import settings
from db.schemas import MetadataRecord
from streaming_providers.exceptions import MetadataError
from utils.const import UA_HEADER

YEAR_PATTERN = re.compile(r"^\s*(\d{4})")


def parse_year(data: dict) -> Optional[int]:
    year = data.get("year")
    if isinstance(year, int):
        return year
    for value in (year, data.get("releaseInfo")):
        # releaseInfo of series looks like "2008–2013"
        if value and (match := YEAR_PATTERN.match(str(value))):
            return int(match.group(1))
    return None


async def get_metadata(media_type: str, title_id: str) -> MetadataRecord:
    url = f"{settings.cinemeta_url}/meta/{media_type}/{title_id}.json"
    try:
        async with httpx.AsyncClient(proxy=settings.requests_proxy_url) as client:
            response = await client.get(
                url, timeout=10, headers=UA_HEADER, follow_redirects=True
            )
            response.raise_for_status()
            data = response.json()["meta"]
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
        logging.error(f"Error fetching Cinemeta data for {title_id}: {e}")
        raise MetadataError(f"Cinemeta lookup failed: {e}", title_id) from e

    if not data or not data.get("name"):
        raise MetadataError("Cinemeta returned no title", title_id)
    return MetadataRecord(name=data["name"], year=parse_year(data))
