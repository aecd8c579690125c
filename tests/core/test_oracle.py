"""Tests for AI field synthesis."""

from datetime import date
from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest

from entracker.core.oracle import FieldSynthesizer, build_prompt, normalize_status
from entracker.exceptions import (
    MalformedOracleOutputError,
    OracleNotConfiguredError,
    UpstreamUnavailableError,
)
from entracker.models.media import MediaType


class FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.requests: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _synthesizer(completions: FakeCompletions) -> FieldSynthesizer:
    synthesizer = FieldSynthesizer("key", model="sonar-pro")
    synthesizer._client = SimpleNamespace(  # type: ignore[assignment]
        chat=SimpleNamespace(completions=completions)
    )
    return synthesizer


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Ended", "Completed"),
        ("Completed", "Completed"),
        ("Finished airing", "Completed"),
        ("Final season aired", "Completed"),
        ("Returning Series", "On Going"),
        ("", "On Going"),
        (None, "On Going"),
    ],
)
def test_normalize_status(value: str | None, expected: str) -> None:
    assert normalize_status(value) == expected


def test_build_prompt_requests_category_keys() -> None:
    movie = build_prompt(MediaType.ANIME_MOVIE, "Akira", today=date(2025, 3, 1))
    series = build_prompt(MediaType.SERIES, "Dark", today=date(2025, 3, 1))

    assert "2025-03-01" in movie[0]["content"]
    assert '"next_part"' in movie[1]["content"]
    assert '"series_status"' not in movie[1]["content"]
    assert "anime movie" in movie[1]["content"]
    assert '"series_status"' in series[1]["content"]
    assert '"next_season"' in series[1]["content"]
    assert '"Dark"' in series[1]["content"]


@pytest.mark.asyncio
async def test_synthesize_extracts_json_from_prose() -> None:
    """Surrounding prose is ignored and the status normalized."""
    completions = FakeCompletions(
        'Sure! Here you go: {"series_status": "Ended", "next_season": "No", '
        '"expected_on": "N/A"} Let me know if you need more.'
    )
    synthesizer = _synthesizer(completions)

    fields = await synthesizer.synthesize(MediaType.SERIES, "Breaking Bad")

    assert fields == {
        "series_status": "Completed",
        "next_season": "No",
        "expected_on": "N/A",
    }
    assert completions.requests[0]["model"] == "sonar-pro"


@pytest.mark.asyncio
async def test_synthesize_prefers_fenced_block() -> None:
    completions = FakeCompletions(
        'Example: {"a": 1}\n```json\n{"next_part": "Yes", "rating": 8}\n```'
    )
    synthesizer = _synthesizer(completions)

    fields = await synthesizer.synthesize(MediaType.MOVIE, "Dune")

    assert fields == {"next_part": "Yes", "rating": "8"}


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["I could not find that title.", "", None])
async def test_synthesize_without_json(content: str | None) -> None:
    synthesizer = _synthesizer(FakeCompletions(content))

    with pytest.raises(MalformedOracleOutputError):
        await synthesizer.synthesize(MediaType.MOVIE, "Dune")


@pytest.mark.asyncio
async def test_api_errors_become_upstream_errors() -> None:
    error = openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.perplexity.ai/chat/completions")
    )
    synthesizer = _synthesizer(FakeCompletions(error=error))

    with pytest.raises(UpstreamUnavailableError):
        await synthesizer.synthesize(MediaType.MOVIE, "Dune")


@pytest.mark.asyncio
async def test_missing_key_is_a_configuration_error() -> None:
    synthesizer = FieldSynthesizer(None)

    with pytest.raises(OracleNotConfiguredError):
        await synthesizer.synthesize(MediaType.MOVIE, "Dune")
