"""Heuristics deciding whether a candidate matches the requested title/season/episode/year.

Every filter accepts when the signal it needs is absent. Provider metadata is
frequently incomplete, and dropping a legitimate candidate is worse than
letting a doubtful one through to ranking.
"""

import re
from functools import lru_cache

from db.schemas import Candidate, MetadataRecord

EXPLICIT_SEASON_MARKER = re.compile(
    r"(?<![a-z0-9])(s\d{1,2}[\s._-]*e\d{1,3}|\d{1,2}x\d{1,3})(?!\d)", re.IGNORECASE
)

# A season named on its own, e.g. "S01" or "Season 1".
SEASON_NAME = re.compile(
    r"(?<![a-z0-9])(?:season[\s._-]*|s)0*(\d{1,2})(?![a-z0-9])", re.IGNORECASE
)

# Tokens that may follow a show title in a release name.
SERIES_TITLE_BOUNDARY = re.compile(
    r"(?<![a-z0-9])("
    r"s\d{1,2}([\s._-]*e\d{1,3})?"
    r"|\d{1,2}x\d{1,3}"
    r"|season[\s._-]*\d+"
    r"|(19|20)\d{2}"
    r"|\d{3,4}p"
    r"|complete"
    r")(?![a-z0-9])",
    re.IGNORECASE,
)


def normalize_title(title: str | None) -> str:
    title = str(title or "").lower()
    title = re.sub(r"['’`]", "", title)
    return re.sub(r"[^a-z0-9]+", " ", title).strip()


def title_matches(candidate_title: str | None, canonical_name: str | None) -> bool:
    if not candidate_title or not canonical_name:
        return True
    return normalize_title(candidate_title) == normalize_title(canonical_name)


def series_title_matches(text: str, expected: str) -> bool:
    """Whether ``text`` is the show ``expected`` (normalized) plus release tokens."""
    normalized = normalize_title(text)
    if normalized == expected:
        return True
    if not normalized.startswith(expected + " "):
        return False
    remainder = normalized[len(expected) :].strip()
    return SERIES_TITLE_BOUNDARY.match(remainder) is not None


def matches_series_title(candidate: Candidate, canonical_name: str | None) -> bool:
    if not canonical_name:
        return True
    fields = [candidate.info.title, *candidate.text_fields]
    fields = [field for field in fields if field]
    if not fields:
        return True

    expected = normalize_title(canonical_name)
    return any(series_title_matches(field, expected) for field in fields)


@lru_cache(maxsize=512)
def _episode_marker_patterns(season: int, episode: int) -> tuple[re.Pattern, ...]:
    return (
        re.compile(
            rf"(?<![a-z0-9])s0*{season}[\s._-]*e0*{episode}(?!\d)", re.IGNORECASE
        ),
        re.compile(rf"(?<![a-z0-9])0*{season}x0*{episode}(?!\d)", re.IGNORECASE),
    )


@lru_cache(maxsize=512)
def _bare_episode_pattern(episode: int) -> re.Pattern:
    return re.compile(
        rf"(?<![a-z0-9])(e|ep|episode)[\s._-]*0*{episode}(?!\d)", re.IGNORECASE
    )


def has_episode_marker(text: str | None, season: int, episode: int) -> bool:
    if not text:
        return False
    season, episode = int(season), int(episode)
    if any(p.search(text) for p in _episode_marker_patterns(season, episode)):
        return True

    # a bare episode number is only trusted when no other season is named
    if EXPLICIT_SEASON_MARKER.search(text):
        return False
    if any(int(named) != season for named in SEASON_NAME.findall(text)):
        return False
    return bool(_bare_episode_pattern(episode).search(text))


def has_structural_episode(candidate: Candidate, season: int, episode: int) -> bool:
    return (
        candidate.info.season is not None
        and candidate.info.episode is not None
        and candidate.info.season == int(season)
        and candidate.info.episode == int(episode)
    )


def filter_season(
    candidate: Candidate, season: int, metadata: MetadataRecord | None
) -> bool:
    season = int(season)
    if candidate.info.season is not None and candidate.info.season == season:
        return True
    if season in candidate.info.seasons:
        return True
    if metadata and metadata.name:
        candidate_title = (
            candidate.info.title
            or candidate.title
            or candidate.name
            or candidate.searchable_name
            or candidate.path
        )
        if not title_matches(candidate_title, metadata.name):
            return False
    return True


def filter_episode(
    candidate: Candidate,
    season: int,
    episode: int,
    metadata: MetadataRecord | None,
) -> bool:
    if metadata and metadata.name:
        if not matches_series_title(candidate, metadata.name):
            return False

    season, episode = int(season), int(episode)
    if any(
        file.info.season == season and file.info.episode == episode
        for file in candidate.files
    ):
        return True
    return any(has_episode_marker(text, season, episode) for text in candidate.text_pool)


def filter_download_episode(
    candidate: Candidate,
    season: int,
    episode: int,
    metadata: MetadataRecord | None,
) -> bool:
    """Episode gate for search hits that are already playable downloads."""
    if has_structural_episode(candidate, season, episode):
        return True

    pool = candidate.text_pool
    has_marker = any(has_episode_marker(text, season, episode) for text in pool)
    if metadata and metadata.name:
        candidate_title = (
            candidate.info.title
            or candidate.title
            or candidate.name
            or candidate.searchable_name
            or candidate.path
        )
        if not title_matches(candidate_title, metadata.name) and not has_marker:
            return False
    return has_marker


def filter_year(candidate: Candidate, metadata: MetadataRecord | None) -> bool:
    if candidate.info.year and metadata and metadata.year:
        return candidate.info.year == metadata.year
    return True


def find_episode_file(candidate: Candidate, season: int, episode: int):
    """Return the file of a multi-file candidate holding the given episode."""
    season, episode = int(season), int(episode)
    for file in candidate.files:
        if file.info.season == season and file.info.episode == episode:
            return file
    for file in candidate.files:
        if any(has_episode_marker(text, season, episode) for text in file.text_fields):
            return file
    return None
