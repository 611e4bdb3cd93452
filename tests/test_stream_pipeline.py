"""
Tests for the stream listing pipeline (api/services/stream.py)

Covers:
- Series listing with season and episode gates
- Movie year filter and language-first ordering
- Unsupported providers and metadata failures
- Verified hits skipping the heuristic filters
- Per-candidate details isolation and batch ordering
- Narrowing multi-file records to the episode file
- Real-Debrid season packs pinned to the episode file
"""

from unittest.mock import AsyncMock

import pytest

from api.services.stream import get_streams, merge_candidate
from db.config import settings
from db.enums import DebridProvider, DetailsMode
from db.schemas import Candidate, FileEntry, MetadataRecord, UserConfig
from streaming_providers.exceptions import (
    MetadataError,
    ProviderException,
    UnsupportedProviderError,
)
from streaming_providers.gateway import ProviderGateway
from streaming_providers.host_reference import split_host_reference
from streaming_providers.realdebrid.gateway import RealDebridGateway

GB = 1024 * 1024 * 1024


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeGateway(ProviderGateway):
    """In-memory gateway returning canned search hits and details."""

    def __init__(
        self,
        hits=None,
        details=None,
        details_mode=DetailsMode.NONE,
        provider=DebridProvider.REALDEBRID,
        failing_ids=(),
        search_error=None,
    ):
        self.provider = provider
        self.details_mode = details_mode
        self.hits = hits or []
        self.details = details or {}
        self.failing_ids = set(failing_ids)
        self.search_error = search_error
        self.search_queries = []
        self.details_calls = []

    async def search(self, api_key, query):
        self.search_queries.append(query)
        if self.search_error:
            raise self.search_error
        return self.hits

    async def get_details(self, api_key, candidate_ids):
        self.details_calls.append(list(candidate_ids))
        if self.failing_ids.intersection(candidate_ids):
            raise ProviderException("details failed", "api_error")
        if self.details_mode == DetailsMode.BATCH:
            # backends return batches in their own order
            return [
                detail
                for candidate_id in reversed(candidate_ids)
                for detail in self.details.get(candidate_id, [])
            ]
        return self.details.get(candidate_ids[0], [])


class ClientSession:
    """Hands out a mocked backend client as ``async with``."""

    def __init__(self, client):
        self.client = client

    async def __aenter__(self):
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


def make_resolver(metadata: MetadataRecord) -> AsyncMock:
    return AsyncMock(return_value=metadata)


def show_hit(make_candidate, name, **info):
    return make_candidate(name, info={"title": "Show", **info})


@pytest.fixture(autouse=True)
def no_host_url(monkeypatch):
    monkeypatch.setattr(settings, "host_url", None)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestSeriesListing:
    @pytest.mark.asyncio
    async def test_only_matching_episode_is_listed(
        self,
        rd_user_config,
        series_content,
        show_metadata,
        make_candidate,
        monkeypatch,
    ):
        monkeypatch.setattr(settings, "host_url", "https://addon.example")
        gateway = FakeGateway(
            hits=[
                show_hit(make_candidate, "Show.S01E04.720p.WEB", season=1, episode=4),
                show_hit(make_candidate, "Show.S01E03.1080p.WEB", season=1, episode=3),
                make_candidate(
                    "Other.Show.S02E03.1080p",
                    info={"title": "Other Show", "season": 2, "episode": 3},
                ),
            ]
        )
        resolver = make_resolver(show_metadata)

        streams = await get_streams(
            rd_user_config, series_content, metadata_resolver=resolver, gateway=gateway
        )

        assert len(streams) == 1
        assert streams[0].title.startswith("[Cloud] Show.S01E03.1080p.WEB")
        assert streams[0].url.startswith(
            "https://addon.example/resolve/realdebrid/rd-token/magnet%3A"
        )
        resolver.assert_awaited_once_with("series", "tt0903747")
        assert gateway.search_queries[0].search_key == "Show"

    @pytest.mark.asyncio
    async def test_marker_keeps_hit_without_structured_episode(
        self, rd_user_config, series_content, show_metadata, make_candidate
    ):
        hit = show_hit(make_candidate, "Show - 1x03 - Pilot.mkv", season=1)
        gateway = FakeGateway(hits=[hit])

        streams = await get_streams(
            rd_user_config,
            series_content,
            metadata_resolver=make_resolver(show_metadata),
            gateway=gateway,
        )

        assert len(streams) == 1

    @pytest.mark.asyncio
    async def test_verified_hits_skip_filters(
        self, series_content, show_metadata, make_candidate
    ):
        direct_link = "https://x1.offcloud.com/cloud/download/abc/Random.Name.mkv"
        gateway = FakeGateway(
            provider=DebridProvider.OFFCLOUD,
            hits=[
                make_candidate(
                    "Random.Name.mkv",
                    provider=DebridProvider.OFFCLOUD,
                    url=direct_link,
                    bypass_filtering=True,
                ),
                show_hit(make_candidate, "Show.S01E03.1080p.WEB", season=1, episode=3),
            ],
        )
        user_config = UserConfig(DebridProvider="OffCloud", DebridApiKey="oc-key")

        streams = await get_streams(
            user_config,
            series_content,
            metadata_resolver=make_resolver(show_metadata),
            gateway=gateway,
        )

        assert [stream.url for stream in streams] == [direct_link]
        assert streams[0].bypassFiltering is True

    @pytest.mark.asyncio
    async def test_multi_file_record_narrowed_to_episode(
        self, rd_user_config, series_content, show_metadata, make_candidate
    ):
        gateway = FakeGateway(
            details_mode=DetailsMode.BATCH,
            provider=DebridProvider.DEBRIDLINK,
            hits=[
                make_candidate(
                    "Show.S01.1080p.WEB",
                    provider=DebridProvider.DEBRIDLINK,
                    id="pack",
                    url=None,
                    info={"title": "Show", "season": 1, "seasons": [1]},
                )
            ],
            details={
                "pack": [
                    Candidate(
                        provider=DebridProvider.DEBRIDLINK,
                        id="pack",
                        url="https://dl.example/e02",
                        files=[
                            FileEntry(
                                id=1,
                                path="Show.S01E02.mkv",
                                size=3 * GB,
                                link="https://dl.example/e02",
                            ),
                            FileEntry(
                                id=2,
                                path="Show.S01E03.mkv",
                                size=1 * GB,
                                link="https://dl.example/e03",
                            ),
                        ],
                    )
                ]
            },
        )

        streams = await get_streams(
            rd_user_config,
            series_content,
            metadata_resolver=make_resolver(show_metadata),
            gateway=gateway,
        )

        assert [stream.url for stream in streams] == ["https://dl.example/e03"]
        assert "1.0 GB" in streams[0].title

    @pytest.mark.asyncio
    async def test_real_debrid_season_pack_is_listed(
        self, rd_user_config, series_content, show_metadata, monkeypatch
    ):
        rd_client = AsyncMock()
        rd_client.get_user_torrent_list.return_value = [
            {
                "id": "PACK",
                "filename": "Show.S01.1080p.WEB-DL.x264",
                "bytes": 20 * GB,
                "hash": "abcdef",
                "status": "downloaded",
            }
        ]
        rd_client.get_torrent_info.return_value = {
            "files": [
                {"id": 2, "path": "/Show.S01E02.mkv", "bytes": 2 * GB, "selected": 1},
                {"id": 3, "path": "/Show.S01E03.mkv", "bytes": 1 * GB, "selected": 1},
            ]
        }
        gateway = RealDebridGateway()
        monkeypatch.setattr(
            gateway, "client", lambda api_key, client_ip=None: ClientSession(rd_client)
        )

        streams = await get_streams(
            rd_user_config,
            series_content,
            metadata_resolver=make_resolver(show_metadata),
            gateway=gateway,
        )

        assert len(streams) == 1
        assert "1.0 GB" in streams[0].title
        _, hint = split_host_reference(streams[0].url)
        assert (hint.file_id, hint.file_path) == (3, "/Show.S01E03.mkv")


class TestMovieListing:
    @pytest.mark.asyncio
    async def test_year_filter_then_language_within_rank(
        self, movie_content, movie_metadata, make_candidate
    ):
        gateway = FakeGateway(
            hits=[
                make_candidate("The.Matrix.1999.1080p", info={"year": 1999}),
                make_candidate("The.Matrix.1999.ITA.1080p", info={"year": 1999}),
                make_candidate("The.Matrix.2021.2160p", info={"year": 2021}),
                make_candidate("The.Matrix.1999.2160p", info={"year": 1999}),
            ]
        )
        user_config = UserConfig(
            DebridProvider="realdebrid", DebridApiKey="rd-token", LangPref="ita"
        )

        streams = await get_streams(
            user_config,
            movie_content,
            metadata_resolver=make_resolver(movie_metadata),
            gateway=gateway,
        )

        assert [stream.title.splitlines()[0] for stream in streams] == [
            "[Cloud] The.Matrix.1999.2160p",
            "[Cloud] The.Matrix.1999.ITA.1080p",
            "[Cloud] The.Matrix.1999.1080p",
        ]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("provider", ["nosuch", None])
    async def test_unsupported_provider_fails_before_metadata(
        self, provider, movie_content, movie_metadata
    ):
        resolver = make_resolver(movie_metadata)
        user_config = UserConfig(DebridProvider=provider, DebridApiKey="key")

        with pytest.raises(UnsupportedProviderError):
            await get_streams(user_config, movie_content, metadata_resolver=resolver)

        resolver.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_failure_yields_no_streams(
        self, rd_user_config, movie_content, movie_metadata
    ):
        gateway = FakeGateway(search_error=ProviderException("down", "api_error"))

        streams = await get_streams(
            rd_user_config,
            movie_content,
            metadata_resolver=make_resolver(movie_metadata),
            gateway=gateway,
        )

        assert streams == []

    @pytest.mark.asyncio
    async def test_metadata_error_propagates(
        self, rd_user_config, movie_content, make_candidate
    ):
        gateway = FakeGateway(hits=[make_candidate("The.Matrix.1999")])
        resolver = AsyncMock(side_effect=MetadataError("no meta", "tt0133093"))

        with pytest.raises(MetadataError):
            await get_streams(
                rd_user_config, movie_content, metadata_resolver=resolver, gateway=gateway
            )

        assert gateway.search_queries == []


# ---------------------------------------------------------------------------
# Details expansion
# ---------------------------------------------------------------------------


def movie_hits(make_candidate, *ids):
    return [
        make_candidate(
            f"Movie.{candidate_id}.1080p",
            provider=DebridProvider.ALLDEBRID,
            id=candidate_id,
            url=None,
        )
        for candidate_id in ids
    ]


def movie_details(*ids):
    return {
        candidate_id: [
            Candidate(
                provider=DebridProvider.ALLDEBRID,
                id=candidate_id,
                url=f"https://dl.example/{candidate_id}",
            )
        ]
        for candidate_id in ids
    }


class TestDetailsExpansion:
    @pytest.mark.asyncio
    async def test_failed_candidate_is_dropped(
        self, movie_content, movie_metadata, make_candidate
    ):
        gateway = FakeGateway(
            details_mode=DetailsMode.PER_CANDIDATE,
            provider=DebridProvider.ALLDEBRID,
            hits=movie_hits(make_candidate, "a", "b", "c"),
            details=movie_details("a", "b", "c"),
            failing_ids={"b"},
        )
        user_config = UserConfig(DebridProvider="alldebrid", DebridApiKey="ad-key")

        streams = await get_streams(
            user_config,
            movie_content,
            metadata_resolver=make_resolver(movie_metadata),
            gateway=gateway,
        )

        assert [stream.url for stream in streams] == [
            "https://dl.example/a",
            "https://dl.example/c",
        ]
        assert sorted(gateway.details_calls) == [["a"], ["b"], ["c"]]

    @pytest.mark.asyncio
    async def test_batch_keeps_hit_order(
        self, movie_content, movie_metadata, make_candidate
    ):
        gateway = FakeGateway(
            details_mode=DetailsMode.BATCH,
            provider=DebridProvider.ALLDEBRID,
            hits=movie_hits(make_candidate, "a", "b", "c"),
            details=movie_details("a", "b", "c"),
        )
        user_config = UserConfig(DebridProvider="alldebrid", DebridApiKey="ad-key")

        streams = await get_streams(
            user_config,
            movie_content,
            metadata_resolver=make_resolver(movie_metadata),
            gateway=gateway,
        )

        assert gateway.details_calls == [["a", "b", "c"]]
        assert [stream.url.rsplit("/", 1)[-1] for stream in streams] == ["a", "b", "c"]

    def test_merge_keeps_hit_fields_missing_from_detail(self, make_candidate):
        hit = make_candidate("Movie.2020.1080p", id="a", size=2 * GB, url=None)
        detail = Candidate(
            provider=DebridProvider.ALLDEBRID, id="a", url="https://dl.example/a"
        )

        merged = merge_candidate(hit, detail)

        assert merged.name == "Movie.2020.1080p"
        assert merged.size == 2 * GB
        assert merged.url == "https://dl.example/a"
        assert merged.provider == DebridProvider.REALDEBRID
