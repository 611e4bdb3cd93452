import logging
import re

from db.schemas import Candidate
from utils.const import LANGUAGE_TOKEN_PATTERNS

logger = logging.getLogger(__name__)


def expand_language_token(token: str) -> str:
    return LANGUAGE_TOKEN_PATTERNS.get(token, re.sub(r"[^a-z0-9]+", "", token))


def build_language_pattern(preference: str | None) -> re.Pattern | None:
    tokens = [
        token.strip().lower()
        for token in (preference or "").split(",")
        if token.strip()
    ]
    pattern = "|".join(filter(None, (expand_language_token(t) for t in tokens)))
    if not pattern:
        return None
    return re.compile(rf"\b({pattern})\b", re.IGNORECASE)


def _candidate_language_fields(candidate: Candidate) -> list[str]:
    fields = [*candidate.text_fields, candidate.info.title]
    return [str(field).lower() for field in fields if field]


def prioritize_language(
    candidates: list[Candidate], preference: str | None
) -> list[Candidate]:
    """
    Move candidates mentioning a preferred language to the front.

    Both partitions keep their original relative order. Any failure leaves the
    input order untouched.
    """
    try:
        language_regex = build_language_pattern(preference)
        if language_regex is None:
            return candidates

        matched, unmatched = [], []
        for candidate in candidates:
            if any(
                language_regex.search(field)
                for field in _candidate_language_fields(candidate)
            ):
                matched.append(candidate)
            else:
                unmatched.append(candidate)
        return matched + unmatched
    except Exception as error:
        logger.error("Error prioritizing language preference %r: %s", preference, error)
        return candidates
