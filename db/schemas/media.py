"""Media and debrid candidate schemas.

This module provides the Pydantic schemas flowing through stream listing and
resolution:
- ContentIdentifier: the requested movie or series episode
- MetadataRecord: canonical title/year from the metadata source
- Candidate: a provider result normalized into one shape
- EpisodeHint: file pinning payload carried inside a host reference
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from db.enums import DebridProvider, MediaType


# ============================================
# Request Schemas
# ============================================


class ContentIdentifier(BaseModel):
    """The movie or series episode a stream listing was requested for."""

    model_config = ConfigDict(frozen=True)

    type: MediaType
    canonical_id: str
    season: int | None = None
    episode: int | None = None

    @model_validator(mode="after")
    def validate_episode(self) -> "ContentIdentifier":
        if self.type == MediaType.SERIES and (
            self.season is None or self.episode is None
        ):
            raise ValueError("Series requests need both season and episode")
        return self

    @classmethod
    def from_video_id(cls, content_type: str, video_id: str) -> "ContentIdentifier":
        """Parse a Stremio video id such as ``tt0903747`` or ``tt0903747:1:5``."""
        canonical_id, *parts = video_id.split(":")
        season = episode = None
        if content_type == MediaType.SERIES and len(parts) >= 2:
            season, episode = int(parts[0]), int(parts[1])
        return cls(
            type=content_type,
            canonical_id=canonical_id,
            season=season,
            episode=episode,
        )


class MetadataRecord(BaseModel):
    """Canonical title and year of the requested content."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    year: int | None = None


# ============================================
# Candidate Schemas
# ============================================


class CandidateInfo(BaseModel):
    """Structured release information parsed from a candidate name."""

    model_config = ConfigDict(frozen=True)

    season: int | None = None
    episode: int | None = None
    seasons: list[int] = Field(default_factory=list)
    year: int | None = None
    resolution: str | None = None
    title: str | None = None


class FileEntry(BaseModel):
    """One file of a multi-file candidate."""

    model_config = ConfigDict(frozen=True)

    id: str | int | None = None
    path: str | None = None
    name: str | None = None
    size: int = Field(default=0, ge=0)
    selected: bool | None = None
    link: str | None = None
    info: CandidateInfo = Field(default_factory=CandidateInfo)

    @property
    def text_fields(self) -> list[str]:
        return [value for value in (self.path, self.name) if value]


class Candidate(BaseModel):
    """A provider search hit or detail record in normalized form."""

    model_config = ConfigDict(frozen=True)

    provider: DebridProvider
    id: str | None = None
    name: str | None = None
    title: str | None = None
    searchable_name: str | None = None
    path: str | None = None
    size: int = Field(default=0, ge=0)
    hash: str | None = None
    info: CandidateInfo = Field(default_factory=CandidateInfo)
    is_personal: bool = True
    bypass_filtering: bool = False
    files: list[FileEntry] = Field(default_factory=list)
    url: str | None = None
    tracker: str | None = None

    @model_validator(mode="before")
    @classmethod
    def default_missing_size(cls, data):
        if isinstance(data, dict) and data.get("size") is None:
            data = {**data, "size": 0}
        return data

    @property
    def display_name(self) -> str:
        return self.name or self.title or ""

    @property
    def text_fields(self) -> list[str]:
        """Candidate-level textual fields, in matching priority."""
        return [
            value
            for value in (self.name, self.title, self.searchable_name, self.path)
            if value
        ]

    @property
    def text_pool(self) -> list[str]:
        """Candidate and file textual fields, used for episode marker lookups."""
        pool = self.text_fields
        for file in self.files:
            pool.extend(file.text_fields)
        return pool


class EpisodeHint(BaseModel):
    """Pins which file inside a multi-file torrent belongs to the requested episode."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_id: str | int | None = Field(default=None, alias="fileId")
    file_path: str | None = Field(default=None, alias="filePath")
    season: int | None = None
    episode: int | None = None
