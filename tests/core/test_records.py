"""Tests for building and projecting media records."""

from datetime import UTC, date, datetime

from entracker.core.records import (
    build_record,
    expected_on_for,
    franchise_name,
    record_from_fields,
    timestamp,
    to_row,
)
from entracker.core.sheets import decode_rows
from entracker.models.media import SHEET_CONFIG, MediaType
from entracker.models.schemas.tmdb import CollectionRef

NOW = datetime(2025, 3, 1, 12, 30, tzinfo=UTC)


def test_franchise_name_strips_collection_suffix() -> None:
    assert franchise_name(CollectionRef(id=1, name="Harry Potter Collection")) == (
        "Harry Potter"
    )
    assert franchise_name(CollectionRef(id=2, name="The Matrix collection ")) == (
        "The Matrix"
    )
    assert franchise_name(CollectionRef(id=3, name="Collection")) == "Collection"
    assert franchise_name(None) == "Standalone"


def test_expected_on_for_release_dates() -> None:
    today = date(2025, 3, 1)
    assert expected_on_for("2025-03-01", today) == "Available"
    assert expected_on_for("2001-11-16", today) == "Available"
    assert expected_on_for("2025-03-02", today) == "N/A"
    assert expected_on_for(None, today) == "N/A"
    assert expected_on_for("soon", today) == "N/A"


def test_timestamp_is_iso_8601() -> None:
    assert timestamp(NOW) == "2025-03-01T12:30:00+00:00"


def test_build_movie_record_drops_series_keys() -> None:
    record = build_record(
        MediaType.ANIME_MOVIE,
        "Your Name.",
        {"next_part": "No", "series_status": "Ended", "expected_on": "Available"},
        watched_till="Episode 4",
        watched=True,
        release_date="2016-08-26",
        now=NOW,
    )

    assert record.franchise == "Standalone"
    assert record.watched_till == "Watched"
    assert record.series_status is None
    assert record.next_part == "No"
    assert record.update == "2025-03-01T12:30:00+00:00"


def test_build_series_record_defaults_status() -> None:
    record = build_record(
        MediaType.ANIME,
        "Frieren",
        {"next_part": "Yes", "expected_on": "January 2026"},
        watched_till=None,
        watched=False,
        franchise="Ignored",
        now=NOW,
    )

    assert record.series_status == "On Going"
    assert record.next_part is None
    assert record.franchise is None
    assert record.watched_till == ""
    assert record.expected_on == "January 2026"


def test_build_record_never_takes_protected_fields_from_model() -> None:
    record = build_record(
        MediaType.SERIES,
        "Dark",
        {"name": "Light", "watched": True, "update": "yesterday", "franchise": "X"},
        watched_till="S1E1",
        watched=False,
        now=NOW,
    )

    assert record.name == "Dark"
    assert record.watched is False
    assert record.update == "2025-03-01T12:30:00+00:00"


def test_row_projection_survives_a_sheet_read() -> None:
    """A stored row decodes back to the same record through title-cased headers."""
    config = SHEET_CONFIG[MediaType.SERIES]
    record = build_record(
        MediaType.SERIES,
        "Severance",
        {"series_status": "On Going", "next_season": "Yes", "expected_on": "N/A"},
        watched_till="S2E4",
        watched=True,
        release_date="2022-02-18",
        now=NOW,
    )

    header = [column.replace("_", " ").title() for column in config.columns]
    decoded = decode_rows([header, to_row(config, record)])

    assert decoded[0]["row_index"] == 2
    assert record_from_fields(config, decoded[0]) == record
