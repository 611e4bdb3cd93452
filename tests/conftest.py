"""
Pytest configuration and shared fixtures for DebridFusion tests.
"""

import pytest

from db.enums import DebridProvider, MediaType
from db.schemas import (
    Candidate,
    CandidateInfo,
    ContentIdentifier,
    MetadataRecord,
    UserConfig,
)

MB = 1024 * 1024
GB = 1024 * MB


def build_candidate(
    name: str = "Show.S01E01.1080p.WEB",
    *,
    provider: DebridProvider = DebridProvider.REALDEBRID,
    size: int | None = 2 * GB,
    url: str | None = "magnet:?xt=urn:btih:0123456789abcdef0123456789abcdef01234567",
    **fields,
) -> Candidate:
    """Create a Candidate with sensible defaults, accepting overrides."""
    info = fields.pop("info", None)
    if isinstance(info, dict):
        info = CandidateInfo(**info)
    return Candidate(
        provider=provider,
        name=name,
        size=size,
        url=url,
        info=info or CandidateInfo(),
        **fields,
    )


@pytest.fixture
def series_content():
    """Breaking Bad style series request for S01E03."""
    return ContentIdentifier(
        type=MediaType.SERIES, canonical_id="tt0903747", season=1, episode=3
    )


@pytest.fixture
def movie_content():
    return ContentIdentifier(type=MediaType.MOVIE, canonical_id="tt0133093")


@pytest.fixture
def show_metadata():
    return MetadataRecord(name="Show", year=2020)


@pytest.fixture
def movie_metadata():
    return MetadataRecord(name="The Matrix", year=1999)


@pytest.fixture
def rd_user_config():
    return UserConfig(DebridProvider="RealDebrid", DebridApiKey="rd-token")


@pytest.fixture
def make_candidate():
    return build_candidate
