import re

from db.enums import DebridProvider

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Methods": "*",
}
CACHE_HEADERS = {
    "Cache-Control": "max-age=3600, stale-while-revalidate=3600, stale-if-error=3600, public",
}
NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}

UA_HEADER = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
}

STREAMING_PROVIDERS_SHORT_NAMES = {
    DebridProvider.ALLDEBRID: "AD",
    DebridProvider.DEBRIDLINK: "DL",
    DebridProvider.OFFCLOUD: "OC",
    DebridProvider.PREMIUMIZE: "PM",
    DebridProvider.REALDEBRID: "RD",
    DebridProvider.TORBOX: "TB",
}

# Links matching these markers are directly fetchable and never proxied.
DIRECT_LINK_MARKERS = {
    DebridProvider.OFFCLOUD: "offcloud.com/cloud/download/",
}

RESOLVE_PATH_SEGMENT = "/resolve/"
HINT_DELIMITER = "||HINT||"

RESOLUTION_ORDER = {
    "2160p": 4,
    "1080p": 3,
    "720p": 2,
    "480p": 1,
    "other": 0,
}

RESOLUTION_PATTERNS = (
    ("2160p", re.compile(r"\b(2160p|4k|uhd)\b", re.IGNORECASE)),
    ("1080p", re.compile(r"\b1080p\b", re.IGNORECASE)),
    ("720p", re.compile(r"\b720p\b", re.IGNORECASE)),
    ("480p", re.compile(r"\b480p\b", re.IGNORECASE)),
)

# Names carrying any of these look like release names worth showing as is.
MEANINGFUL_NAME_PATTERNS = (
    re.compile(r"s\d{2}e\d{2}", re.IGNORECASE),
    re.compile(r"1080p|720p|480p|2160p|4k", re.IGNORECASE),
    re.compile(r"bluray|web|hdtv|dvd|brrip", re.IGNORECASE),
    re.compile(r"x264|x265|h264|h265", re.IGNORECASE),
    re.compile(r"remaster|director|extended", re.IGNORECASE),
    re.compile(r"\d{4}"),
)

LANGUAGE_TOKEN_PATTERNS = {
    "ita": "(ita|italian|italiano)",
    "italian": "(ita|italian|italiano)",
    "italiano": "(ita|italian|italiano)",
    "eng": "(eng|english)",
    "english": "(eng|english)",
    "multi": "(multi|multilang|multiaudio)",
    "multilang": "(multi|multilang|multiaudio)",
    "multiaudio": "(multi|multilang|multiaudio)",
    "spa": "(spa|spanish|cast|español|esp)",
    "spanish": "(spa|spanish|cast|español|esp)",
    "es": "(spa|spanish|cast|español|esp)",
    "por": "(por|portuguese|portugues|brazil|br)",
    "pt": "(por|portuguese|portugues|brazil|br)",
    "portuguese": "(por|portuguese|portugues|brazil|br)",
    "br": "(por|portuguese|portugues|brazil|br)",
    "fra": "(fra|fre|french|français|francais)",
    "fre": "(fra|fre|french|français|francais)",
    "fr": "(fra|fre|french|français|francais)",
    "french": "(fra|fre|french|français|francais)",
    "ger": "(ger|german|deutsch)",
    "de": "(ger|german|deutsch)",
    "german": "(ger|german|deutsch)",
}

VIDEO_EXTENSIONS = frozenset(
    {
        ".mp4",
        ".mkv",
        ".avi",
        ".mov",
        ".wmv",
        ".flv",
        ".webm",
        ".m4v",
        ".mpg",
        ".mpeg",
        ".3gp",
        ".ogv",
        ".ts",
        ".m2ts",
    }
)
VIDEO_NOISE_PATTERN = re.compile(
    r"\b(sample|trailer|promo|extra|featurette|behindthescenes|bonus|cd\d+)\b",
    re.IGNORECASE,
)
BLOCKED_FILE_EXTENSION_PATTERN = re.compile(
    r"\.(exe|iso|dmg|pkg|msi|deb|rpm|zip|rar|7z|tar|gz|txt|nfo|sfv)$", re.IGNORECASE
)

MAGNET_DOWNLOADED_STATUSES = frozenset({"downloaded", "finished"})
MAGNET_FAILED_STATUSES = frozenset({"magnet_error", "error", "virus", "dead"})
