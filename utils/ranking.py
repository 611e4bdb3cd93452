from db.schemas import Candidate
from utils.const import RESOLUTION_ORDER, RESOLUTION_PATTERNS


def get_resolution_from_name(name: str | None) -> str:
    if name:
        for resolution, pattern in RESOLUTION_PATTERNS:
            if pattern.search(name):
                return resolution
    return "other"


def resolution_rank(candidate: Candidate) -> int:
    return RESOLUTION_ORDER.get(get_resolution_from_name(candidate.display_name), 0)


def sort_key(candidate: Candidate) -> tuple[int, int]:
    return -resolution_rank(candidate), -(candidate.size or 0)


def sort_candidates(candidates: list[Candidate]) -> list[Candidate]:
    """Highest resolution first, then largest size. Ties keep input order."""
    return sorted(candidates, key=sort_key)
