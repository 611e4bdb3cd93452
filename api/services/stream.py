"""Stream listing service.

Builds the stream list of a movie or a series episode out of the user's debrid
cloud: search the configured provider, filter the hits against the canonical
metadata, rank them, expand them into streamable records and format them.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from db.enums import DetailsMode, MediaType
from db.schemas import Candidate, ContentIdentifier, MetadataRecord, Stream, UserConfig
from scrapers import cinemeta
from streaming_providers import mapper
from streaming_providers.exceptions import ProviderException
from streaming_providers.gateway import ProviderGateway, SearchQuery
from utils.language import prioritize_language
from utils.matching import (
    filter_download_episode,
    filter_episode,
    filter_season,
    filter_year,
    find_episode_file,
    has_structural_episode,
)
from utils.parser import to_stream
from utils.ranking import sort_candidates

logger = logging.getLogger(__name__)

MetadataResolver = Callable[[str, str], Awaitable[MetadataRecord]]


@dataclass(frozen=True)
class DetailResult:
    """Outcome of one details fetch. A failed fetch carries the error and no candidates."""

    candidate_id: str
    candidates: list[Candidate] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def merge_candidate(hit: Candidate, detail: Candidate) -> Candidate:
    """Overlay the fields a detail record carries onto its search hit."""
    update = {}
    for name in detail.model_fields_set:
        value = getattr(detail, name)
        if value is None or name == "provider" or (name == "size" and not value):
            continue
        update[name] = value
    return hit.model_copy(update=update)


async def fetch_details(
    gateway: ProviderGateway, api_key: str, candidate_ids: list[str]
) -> DetailResult:
    candidate_id = ",".join(candidate_ids)
    try:
        candidates = await gateway.get_details(api_key, candidate_ids)
    except Exception as error:
        return DetailResult(candidate_id, error=error)
    return DetailResult(candidate_id, candidates)


async def expand_details(
    gateway: ProviderGateway, api_key: str, hits: list[Candidate]
) -> list[Candidate]:
    if gateway.details_mode == DetailsMode.NONE:
        return hits

    hit_ids = [hit.id for hit in hits if hit.id]
    if not hit_ids:
        return []
    if gateway.details_mode == DetailsMode.BATCH:
        results = [await fetch_details(gateway, api_key, hit_ids)]
    else:
        results = await asyncio.gather(
            *(fetch_details(gateway, api_key, [hit_id]) for hit_id in hit_ids)
        )

    details_by_id: dict[str, list[Candidate]] = {}
    for result in results:
        if not result.ok:
            logger.warning(
                "Dropping %s candidate %s: %s",
                gateway.provider,
                result.candidate_id,
                result.error,
            )
            continue
        for detail in result.candidates:
            details_by_id.setdefault(str(detail.id), []).append(detail)

    # keep the ranked order of the search hits
    expanded = []
    for hit in hits:
        for detail in details_by_id.pop(str(hit.id), []):
            expanded.append(merge_candidate(hit, detail))
    return expanded


def narrow_to_episode(candidate: Candidate, season: int, episode: int) -> Candidate:
    if not any(file.link for file in candidate.files):
        return candidate
    episode_file = find_episode_file(candidate, season, episode)
    if episode_file is None or not episode_file.link:
        return candidate
    return candidate.model_copy(
        update={"url": episode_file.link, "size": episode_file.size or candidate.size}
    )


def select_episode_candidates(
    candidates: list[Candidate],
    content: ContentIdentifier,
    metadata: MetadataRecord,
    details_mode: DetailsMode,
) -> list[Candidate]:
    season, episode = content.season, content.episode
    selected = []
    for candidate in candidates:
        if not has_structural_episode(candidate, season, episode):
            if details_mode == DetailsMode.NONE:
                matched = filter_download_episode(candidate, season, episode, metadata)
            else:
                matched = filter_episode(candidate, season, episode, metadata)
            if not matched:
                continue
        selected.append(narrow_to_episode(candidate, season, episode))
    return selected


async def get_streams(
    user_config: UserConfig,
    content: ContentIdentifier,
    metadata_resolver: MetadataResolver = cinemeta.get_metadata,
    gateway: Optional[ProviderGateway] = None,
) -> list[Stream]:
    """
    List the streams of the requested content from the user's debrid cloud.

    Raises ``UnsupportedProviderError`` when no known provider is configured and
    ``MetadataError`` when the canonical title cannot be fetched. Provider
    failures only shrink the result.
    """
    gateway = gateway or mapper.get_provider_gateway(user_config.debrid_provider)
    metadata = await metadata_resolver(content.type, content.canonical_id)
    api_key = user_config.api_key

    query = SearchQuery(content=content, search_key=metadata.name)
    try:
        hits = await gateway.search(api_key, query)
    except ProviderException as error:
        logger.error(
            "%s search failed for %s: %s", gateway.provider, content.canonical_id, error
        )
        return []
    if not hits:
        return []

    is_series = content.type == MediaType.SERIES
    verified = [hit for hit in hits if hit.bypass_filtering] if is_series else []
    if verified:
        hits = verified
    elif is_series:
        hits = [hit for hit in hits if filter_season(hit, content.season, metadata)]
    else:
        hits = [hit for hit in hits if filter_year(hit, metadata)]

    hits = sort_candidates(prioritize_language(hits, user_config.language_preference))
    candidates = await expand_details(gateway, api_key, hits)

    if is_series and not verified:
        candidates = select_episode_candidates(
            candidates, content, metadata, gateway.details_mode
        )

    streams = [to_stream(candidate, content.type, user_config) for candidate in candidates]
    return [stream for stream in streams if stream is not None]
