import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from os.path import basename
from typing import ClassVar, Iterable, Optional, Type

import PTT
from thefuzz import fuzz

from db.config import settings
from db.enums import DebridProvider, DetailsMode
from db.schemas import Candidate, CandidateInfo, ContentIdentifier, FileEntry
from streaming_providers.debrid_client import DebridClient
from streaming_providers.exceptions import ProviderException
from streaming_providers.parser import is_valid_video
from utils.matching import normalize_title

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchQuery:
    content: ContentIdentifier
    search_key: Optional[str] = None
    min_score: Optional[float] = None

    @property
    def score_threshold(self) -> float:
        if self.min_score is None:
            return settings.provider_search_min_score
        return self.min_score


def parse_release_info(name: Optional[str]) -> CandidateInfo:
    """Parse season, episode, year and resolution out of a release name."""
    if not name:
        return CandidateInfo()
    parsed = PTT.parse_title(name)
    seasons = parsed.get("seasons") or []
    episodes = parsed.get("episodes") or []
    return CandidateInfo(
        season=seasons[0] if len(seasons) == 1 else None,
        episode=episodes[0] if len(seasons) <= 1 and len(episodes) == 1 else None,
        seasons=seasons,
        year=parsed.get("year"),
        resolution=parsed.get("resolution"),
        title=parsed.get("title") or None,
    )


def calculate_similarity_score(name: Optional[str], search_key: Optional[str]) -> float:
    """
    Similarity of a cloud item name to the searched title, scaled to 0..1.

    Release names carry a lot of noise after the title, so the parsed title is
    compared as well as the raw name and the best ratio wins.
    """
    if not name or not search_key:
        return 0.0
    key = normalize_title(search_key)
    ratios = [
        fuzz.ratio(normalize_title(name), key),
        fuzz.partial_ratio(key, normalize_title(name)),
    ]
    parsed_title = PTT.parse_title(name).get("title")
    if parsed_title:
        ratios.append(fuzz.ratio(normalize_title(parsed_title), key))
    return max(ratios) / 100


def filter_by_score(
    items: Iterable[dict], query: SearchQuery, name_key: str = "name"
) -> list[dict]:
    if not query.search_key:
        return list(items)
    return [
        item
        for item in items
        if calculate_similarity_score(item.get(name_key), query.search_key)
        >= query.score_threshold
    ]


def largest_video_link(files: list[FileEntry]) -> Optional[str]:
    linked = [
        file
        for file in files
        if file.link and is_valid_video(file.path or file.name, file.size)
    ]
    if not linked:
        return None
    return max(linked, key=lambda file: file.size).link


def build_file_entry(
    file_id, path: Optional[str], size: Optional[int], link: Optional[str] = None, **kwargs
) -> FileEntry:
    name = basename(path) if path else None
    return FileEntry(
        id=file_id,
        path=path,
        name=name,
        size=size or 0,
        link=link,
        info=parse_release_info(name),
        **kwargs,
    )


class ProviderGateway(ABC):
    """
    Capability interface of one debrid backend.

    Adapters normalize the backend's responses into Candidate records.
    ``details_mode`` tells the listing pipeline how search hits expand into
    streamable records.
    """

    provider: ClassVar[DebridProvider]
    details_mode: ClassVar[DetailsMode] = DetailsMode.NONE
    client_class: ClassVar[Type[DebridClient]]

    def client(self, api_key: str, client_ip: Optional[str] = None) -> DebridClient:
        return self.client_class(token=api_key, user_ip=client_ip)

    def make_candidate(self, **fields) -> Candidate:
        if "info" not in fields:
            fields["info"] = parse_release_info(fields.get("name"))
        return Candidate(provider=self.provider, **fields)

    @abstractmethod
    async def search(self, api_key: str, query: SearchQuery) -> list[Candidate]:
        """Return the cloud items matching the query, or an empty list."""

    async def get_details(
        self, api_key: str, candidate_ids: list[str]
    ) -> list[Candidate]:
        return []

    async def resolve_url(
        self,
        api_key: str,
        host_reference: str,
        client_ip: Optional[str] = None,
        item_id: Optional[str] = None,
    ) -> Optional[str]:
        try:
            return await self._resolve_url(api_key, host_reference, client_ip, item_id)
        except ProviderException as error:
            logger.error(
                "Failed to resolve %s reference: %s (%s)",
                self.provider,
                error.message,
                error.reason,
            )
            return None

    async def _resolve_url(
        self,
        api_key: str,
        host_reference: str,
        client_ip: Optional[str],
        item_id: Optional[str],
    ) -> Optional[str]:
        return host_reference
