"""
Schemas package.

This module re-exports all Pydantic schemas for easy importing:
    from db.schemas import UserConfig, Candidate, Stream, ...
"""

# Configuration schemas
from db.schemas.config import UserConfig

# Media/candidate schemas
from db.schemas.media import (
    Candidate,
    CandidateInfo,
    ContentIdentifier,
    EpisodeHint,
    FileEntry,
    MetadataRecord,
)

# Stremio schemas
from db.schemas.stremio import Stream, StreamBehaviorHints, Streams

__all__ = [
    "Candidate",
    "CandidateInfo",
    "ContentIdentifier",
    "EpisodeHint",
    "FileEntry",
    "MetadataRecord",
    "Stream",
    "StreamBehaviorHints",
    "Streams",
    "UserConfig",
]
