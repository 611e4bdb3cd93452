from enum import StrEnum


# Enums
class MediaType(StrEnum):
    MOVIE = "movie"
    SERIES = "series"


class DebridProvider(StrEnum):
    REALDEBRID = "realdebrid"
    ALLDEBRID = "alldebrid"
    PREMIUMIZE = "premiumize"
    DEBRIDLINK = "debridlink"
    OFFCLOUD = "offcloud"
    TORBOX = "torbox"


class DetailsMode(StrEnum):
    NONE = "none"
    BATCH = "batch"
    PER_CANDIDATE = "per_candidate"


class ResolveStatus(StrEnum):
    SUBMITTED = "submitted"
    FILES_SELECTED = "files_selected"
    POLLING = "polling"
    DOWNLOADED = "downloaded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    RESOLVED = "resolved"
