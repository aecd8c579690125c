"""Building storage-ready media records."""

import re
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from entracker.core.oracle import normalize_status
from entracker.models.media import (
    NOT_WATCHED,
    STANDALONE,
    WATCHED,
    MediaRecord,
    MediaType,
    MediaTypeConfig,
)
from entracker.models.schemas.tmdb import CollectionRef

__all__ = [
    "build_record",
    "expected_on_for",
    "franchise_name",
    "record_from_fields",
    "timestamp",
    "to_row",
    "watched_sentinel",
]

COLLECTION_SUFFIX_PATTERN = re.compile(r"\s+collection\s*$", re.IGNORECASE)

# Keys the oracle is never trusted with
_PROTECTED_FIELDS = {"name", "watched", "watched_till", "update", "franchise"}


def timestamp(now: datetime | None = None) -> str:
    """ISO 8601 timestamp for the `update` column."""
    return (now or datetime.now(UTC)).isoformat()


def watched_sentinel(watched: bool) -> str:
    """Watched-till value of a movie-like title."""
    return WATCHED if watched else NOT_WATCHED


def franchise_name(collection: CollectionRef | None) -> str:
    """Franchise display name of a title.

    "Harry Potter Collection" becomes "Harry Potter"; titles outside any
    collection are "Standalone".
    """
    if collection is None or not collection.name.strip():
        return STANDALONE
    return COLLECTION_SUFFIX_PATTERN.sub("", collection.name).strip() or STANDALONE


def expected_on_for(release_date: str | None, today: date | None = None) -> str:
    """Return "Available" once a release date has passed, otherwise "N/A"."""
    if not release_date:
        return "N/A"
    try:
        released = date.fromisoformat(release_date)
    except ValueError:
        return "N/A"
    return "Available" if released <= (today or date.today()) else "N/A"


def build_record(
    media_type: MediaType,
    name: str,
    oracle_fields: Mapping[str, Any],
    watched_till: str | None,
    watched: bool,
    *,
    franchise: str | None = None,
    release_date: str | None = None,
    now: datetime | None = None,
) -> MediaRecord:
    """Merge model output with form input into a record.

    Movie-like titles get the fixed "Watched"/"Not Watched" watched-till
    value; series-like titles keep the form's season/episode descriptor.
    Franchise and release date come from TMDB, never from the model.

    Args:
        media_type (MediaType): Category of the title.
        name (str): Canonical title.
        oracle_fields (Mapping[str, Any]): Fields extracted from the model.
        watched_till (str | None): Form-supplied progress descriptor.
        watched (bool): Form-supplied watched flag.
        franchise (str | None): Franchise display name (movie-like only).
        release_date (str | None): TMDB release or first-air date.
        now (datetime | None): Clock override for the `update` stamp.

    Returns:
        MediaRecord: The record ready to be projected into a row.
    """
    fields = {
        key: str(value)
        for key, value in oracle_fields.items()
        if key in MediaRecord.model_fields
        and key not in _PROTECTED_FIELDS
        and value is not None
    }
    fields["release_date"] = release_date or None

    if media_type.is_movie_like:
        fields.pop("series_status", None)
        fields.pop("next_season", None)
        fields["franchise"] = franchise or STANDALONE
        fields["watched_till"] = watched_sentinel(watched)
    else:
        fields.pop("next_part", None)
        fields["series_status"] = normalize_status(fields.get("series_status"))
        fields["watched_till"] = watched_till or ""

    return MediaRecord(name=name, watched=watched, update=timestamp(now), **fields)


def to_row(config: MediaTypeConfig, record: MediaRecord) -> list[str]:
    """Project a record into the column order of its sheet.

    Args:
        config (MediaTypeConfig): Target sheet layout.
        record (MediaRecord): Record to store.

    Returns:
        list[str]: One string per column, "" where the record has no value.
    """
    fields = record.to_fields(config)
    return [fields[column] for column in config.columns]


def record_from_fields(
    config: MediaTypeConfig, fields: Mapping[str, Any]
) -> MediaRecord:
    """Rebuild a record from a decoded row (inverse of `to_row`)."""
    return MediaRecord.from_fields(config, fields)
