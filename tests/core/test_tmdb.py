"""Tests for the TMDB client."""

from typing import Any

import pytest
from aiohttp import test_utils, web

from entracker.core.tmdb import TMDBClient
from entracker.exceptions import MetadataNotConfiguredError, UpstreamUnavailableError
from entracker.models.media import MediaType


def _patch_requests(
    monkeypatch: pytest.MonkeyPatch, responses: dict[str, dict[str, Any]]
) -> list[tuple[str, dict | None]]:
    calls: list[tuple[str, dict | None]] = []

    async def fake_make_request(
        self: TMDBClient, path: str, params: dict | None = None
    ) -> dict[str, Any]:
        calls.append((path, params))
        return responses[path]

    monkeypatch.setattr(TMDBClient, "_make_request", fake_make_request)
    return calls


@pytest.mark.asyncio
async def test_search_uses_category_index(monkeypatch: pytest.MonkeyPatch) -> None:
    """Movie-like searches hit the movie index, series-like the TV index."""
    calls = _patch_requests(
        monkeypatch,
        {
            "/search/movie": {
                "results": [
                    {"id": 27205, "title": "Inception", "release_date": "2010-07-15"}
                ]
            },
            "/search/tv": {
                "results": [
                    {"id": 1396, "name": "Breaking Bad", "first_air_date": ""}
                ]
            },
        },
    )
    client = TMDBClient("key")

    movies = await client.search(MediaType.ANIME_MOVIE, "Inception")
    shows = await client.search(MediaType.SERIES, "Breaking Bad")

    assert [(m.id, m.name, m.release_date) for m in movies] == [
        (27205, "Inception", "2010-07-15")
    ]
    assert [(s.id, s.name, s.release_date) for s in shows] == [
        (1396, "Breaking Bad", None)
    ]
    assert calls[0] == ("/search/movie", {"query": "Inception"})


@pytest.mark.asyncio
async def test_fetch_details_with_collection_and_providers(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls = _patch_requests(
        monkeypatch,
        {
            "/movie/671": {
                "id": 671,
                "title": "Harry Potter and the Philosopher's Stone",
                "release_date": "2001-11-16",
                "vote_average": 7.9,
                "genres": [{"id": 12, "name": "Adventure"}],
                "belongs_to_collection": {
                    "id": 1241,
                    "name": "Harry Potter Collection",
                    "poster_path": "/hp.jpg",
                },
                "watch/providers": {
                    "results": {
                        "US": {"rent": [{"provider_name": "Apple TV"}]},
                        "IN": {
                            "flatrate": [
                                {"provider_id": 119, "provider_name": "Prime Video"}
                            ]
                        },
                    }
                },
            }
        },
    )
    client = TMDBClient("key")

    details = await client.fetch_details(MediaType.MOVIE, 671, with_providers=True)

    assert details.name == "Harry Potter and the Philosopher's Stone"
    assert details.collection is not None
    assert details.collection.id == 1241
    assert details.genres == ["Adventure"]
    assert [p.provider_name for p in details.providers] == ["Prime Video"]
    assert calls == [("/movie/671", {"append_to_response": "watch/providers"})]


@pytest.mark.asyncio
async def test_fetch_collection_members(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_requests(
        monkeypatch,
        {
            "/collection/1241": {
                "id": 1241,
                "name": "Harry Potter Collection",
                "parts": [
                    {"id": 671, "title": "Philosopher's Stone", "release_date": ""},
                    {"id": 672, "title": "Chamber of Secrets"},
                ],
            }
        },
    )
    client = TMDBClient("key")

    parts = await client.fetch_collection_members(1241)

    assert [(p.id, p.release_date) for p in parts] == [(671, None), (672, None)]


@pytest.mark.asyncio
async def test_search_collection(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_requests(
        monkeypatch,
        {"/search/collection": {"results": [{"id": 131292, "name": "Iron Man"}]}},
    )
    client = TMDBClient("key")

    ref = await client.search_collection("Iron Man")

    assert ref is not None
    assert ref.id == 131292


@pytest.mark.asyncio
async def test_missing_key_is_a_configuration_error() -> None:
    client = TMDBClient(None)

    with pytest.raises(MetadataNotConfiguredError):
        await client.search(MediaType.MOVIE, "Inception")


@pytest.mark.asyncio
async def test_http_requests_against_local_server() -> None:
    """Real requests carry the key and map error statuses to upstream errors."""
    seen: list[dict[str, str]] = []

    async def search(request: web.Request) -> web.Response:
        seen.append(dict(request.query))
        return web.json_response({"results": [{"id": 1, "title": "Alien"}]})

    async def broken(request: web.Request) -> web.Response:
        return web.Response(status=500, text="boom")

    app = web.Application()
    app.router.add_get("/search/movie", search)
    app.router.add_get("/movie/1", broken)

    async with test_utils.TestServer(app) as server:
        client = TMDBClient("secret", base_url=str(server.make_url("/")))
        try:
            results = await client.search(MediaType.MOVIE, "Alien")
            with pytest.raises(UpstreamUnavailableError):
                await client.fetch_details(MediaType.MOVIE, 1)
        finally:
            await client.close()

    assert [r.name for r in results] == ["Alien"]
    assert seen == [{"api_key": "secret", "query": "Alien"}]
