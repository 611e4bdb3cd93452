import logging
from os.path import splitext
from typing import Optional
from urllib.parse import unquote

from db.config import settings
from db.schemas import EpisodeHint, FileEntry
from utils.const import (
    BLOCKED_FILE_EXTENSION_PATTERN,
    VIDEO_EXTENSIONS,
    VIDEO_NOISE_PATTERN,
)
from utils.matching import has_episode_marker

logger = logging.getLogger(__name__)


def is_video_file(filename: str | None) -> bool:
    if not filename:
        return False
    return splitext(filename.lower())[1] in VIDEO_EXTENSIONS


def is_valid_video(
    filename: str | None, size: int | None = 0, min_size: Optional[int] = None
) -> bool:
    """
    Whether the file is a playable main feature.

    Samples, trailers, extras and archives are rejected, and so is anything
    below the minimum size. A zero or missing size counts as unknown and passes.
    """
    if not filename:
        return False
    decoded = unquote(filename).lower()
    if not is_video_file(decoded):
        return False
    if VIDEO_NOISE_PATTERN.search(decoded):
        return False
    if BLOCKED_FILE_EXTENSION_PATTERN.search(decoded):
        return False
    min_size = settings.min_video_size if min_size is None else min_size
    if size and size < min_size:
        return False
    return True


def select_video_file(
    files: list[FileEntry],
    hint: Optional[EpisodeHint] = None,
    min_size: Optional[int] = None,
) -> Optional[FileEntry]:
    """
    Pick the file to stream out of a multi-file torrent.

    With a hint, the file id wins over the file path, which wins over a
    season/episode marker in the path. Otherwise the largest valid video is used.
    """
    video_files = [
        file
        for file in files
        if is_valid_video(file.path or file.name, file.size, min_size)
    ]
    if not video_files:
        return None

    if hint:
        if hint.file_id is not None:
            for file in video_files:
                if str(file.id) == str(hint.file_id):
                    return file
        if hint.file_path:
            for file in video_files:
                if file.path == hint.file_path:
                    return file
        if hint.season and hint.episode:
            for file in video_files:
                if any(
                    has_episode_marker(text, hint.season, hint.episode)
                    for text in file.text_fields
                ):
                    return file
        logger.debug("Episode hint %s matched no file, using the largest", hint)

    return max(video_files, key=lambda file: file.size)
