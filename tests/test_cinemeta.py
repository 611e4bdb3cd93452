"""
Tests for the Cinemeta metadata lookup (scrapers/cinemeta.py)

HTTP calls go through httpx.MockTransport.
"""

import httpx
import pytest

from scrapers import cinemeta
from streaming_providers.exceptions import MetadataError


@pytest.fixture
def cinemeta_transport(monkeypatch):
    """Route Cinemeta requests to a handler and record them."""
    requests = []
    state = {"handler": None}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return state["handler"](request)

    def client_factory(**kwargs):
        kwargs.pop("proxy", None)
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(cinemeta.httpx, "AsyncClient", client_factory)

    def respond_with(func):
        state["handler"] = func
        return requests

    return respond_with


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"year": 1999}, 1999),
        ({"year": "2008–2013"}, 2008),
        ({"releaseInfo": "2019-"}, 2019),
        ({"year": "", "releaseInfo": "1994"}, 1994),
        ({"year": "unknown"}, None),
        ({}, None),
    ],
)
def test_parse_year(data, expected):
    assert cinemeta.parse_year(data) == expected


class TestGetMetadata:
    @pytest.mark.asyncio
    async def test_series_metadata(self, cinemeta_transport):
        requests = cinemeta_transport(
            lambda request: httpx.Response(
                200,
                json={"meta": {"name": "Breaking Bad", "releaseInfo": "2008–2013"}},
            )
        )

        metadata = await cinemeta.get_metadata("series", "tt0903747")

        assert metadata.name == "Breaking Bad"
        assert metadata.year == 2008
        assert requests[0].url.path == "/meta/series/tt0903747.json"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(404, json={"error": "not found"}),
            httpx.Response(200, content=b"<html>"),
            httpx.Response(200, json={"other": {}}),
            httpx.Response(200, json={"meta": None}),
            httpx.Response(200, json={"meta": {"year": 1999}}),
        ],
    )
    async def test_failures_raise_metadata_error(self, cinemeta_transport, response):
        cinemeta_transport(lambda request: response)

        with pytest.raises(MetadataError) as error:
            await cinemeta.get_metadata("movie", "tt0133093")

        assert error.value.content_id == "tt0133093"
