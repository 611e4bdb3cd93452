"""Stremio addon schemas for manifest and stream responses."""

from pydantic import BaseModel, Field


class StreamBehaviorHints(BaseModel):
    """Stremio stream behavior hints."""

    bingeGroup: str | None = None
    notWebReady: bool | None = None
    filename: str | None = None
    videoSize: int | None = None


class Stream(BaseModel):
    """Stremio stream object."""

    name: str
    title: str
    url: str
    behaviorHints: StreamBehaviorHints | None = None
    bypassFiltering: bool | None = None


class Streams(BaseModel):
    """Collection of streams."""

    streams: list[Stream] = Field(default_factory=list)
