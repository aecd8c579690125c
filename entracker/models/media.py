"""Media categories, their sheet layouts and the row record model."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, model_validator

from entracker.config.settings import BaseStrEnum
from entracker.exceptions import UnsupportedMediaTypeError

__all__ = [
    "NOT_WATCHED",
    "SHEET_CONFIG",
    "STANDALONE",
    "WATCHED",
    "MediaRecord",
    "MediaType",
    "MediaTypeConfig",
    "get_sheet_config",
]

STANDALONE = "Standalone"
WATCHED = "Watched"
NOT_WATCHED = "Not Watched"


class MediaType(BaseStrEnum):
    """Supported media categories.

    Movie-like categories are tracked as watched/unwatched and grouped into
    franchises; series-like categories track an episodic watched-till value.
    """

    SERIES = "series"
    MOVIE = "movie"
    ANIME = "anime"
    ANIME_MOVIE = "anime_movie"

    @property
    def is_movie_like(self) -> bool:
        """Whether the category holds single films rather than episodic shows."""
        return self in (MediaType.MOVIE, MediaType.ANIME_MOVIE)

    @property
    def tmdb_kind(self) -> str:
        """TMDB path segment used for searches and detail lookups."""
        return "movie" if self.is_movie_like else "tv"

    @classmethod
    def parse(cls, value: str | MediaType | None) -> MediaType:
        """Resolve a user-supplied category name.

        Args:
            value (str | MediaType | None): Category name, case-insensitive.

        Returns:
            MediaType: The matching category.

        Raises:
            UnsupportedMediaTypeError: If the value is not a known category.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise UnsupportedMediaTypeError(f"Invalid media type: {value}") from e


class MediaTypeConfig(BaseModel):
    """Sheet layout of one media category."""

    model_config = ConfigDict(frozen=True)

    media_type: MediaType
    sheet_name: str
    address_range: str
    columns: tuple[str, ...]

    @model_validator(mode="after")
    def validate_columns(self) -> MediaTypeConfig:
        """Ensure the column list carries every column the workflows address."""
        required = {"watched", "watched_till", "release_date"}
        if self.media_type.is_movie_like:
            required |= {"franchise", "next_part"}
        else:
            required |= {"series_status", "next_season"}

        missing = required - set(self.columns)
        if missing:
            raise ValueError(
                f"{self.sheet_name} is missing columns: {', '.join(sorted(missing))}"
            )
        if not self.columns[0].endswith("_name"):
            raise ValueError(f"{self.sheet_name} must start with a name column")
        return self

    @property
    def name_column(self) -> str:
        """The column holding the title, always the first one."""
        return self.columns[0]

    def column_index(self, column: str) -> int:
        """Zero-based position of a column.

        Raises:
            KeyError: If the column is not part of this layout.
        """
        try:
            return self.columns.index(column)
        except ValueError:
            raise KeyError(f"{column} is not a column of {self.sheet_name}") from None


def _config(
    media_type: MediaType, sheet_name: str, last_column: str, *columns: str
) -> MediaTypeConfig:
    return MediaTypeConfig(
        media_type=media_type,
        sheet_name=sheet_name,
        address_range=f"{sheet_name}!A:{last_column}",
        columns=columns,
    )


_SERIES_COLUMNS = (
    "series_status",
    "watched_till",
    "next_season",
    "expected_on",
    "update",
    "watched",
    "release_date",
)
_MOVIE_COLUMNS = (
    "franchise",
    "watched_till",
    "next_part",
    "expected_on",
    "update",
    "watched",
    "release_date",
)

SHEET_CONFIG: Mapping[MediaType, MediaTypeConfig] = MappingProxyType(
    {
        MediaType.SERIES: _config(
            MediaType.SERIES, "Series", "I", "series_name", *_SERIES_COLUMNS
        ),
        MediaType.MOVIE: _config(
            MediaType.MOVIE, "Movies", "H", "movies_name", *_MOVIE_COLUMNS
        ),
        MediaType.ANIME: _config(
            MediaType.ANIME, "Anime", "I", "anime_name", *_SERIES_COLUMNS
        ),
        MediaType.ANIME_MOVIE: _config(
            MediaType.ANIME_MOVIE, "Anime Movies", "H", "movies_name", *_MOVIE_COLUMNS
        ),
    }
)


def get_sheet_config(media_type: str | MediaType) -> MediaTypeConfig:
    """Look up the sheet layout of a category.

    Args:
        media_type (str | MediaType): Category name or member.

    Returns:
        MediaTypeConfig: The category's layout.

    Raises:
        UnsupportedMediaTypeError: If the category is unknown.
    """
    return SHEET_CONFIG[MediaType.parse(media_type)]


class MediaRecord(BaseModel):
    """One tracked title, as stored in a sheet row.

    `watched` is a real boolean here; the sheet stores it as "True"/"False".
    """

    name: str
    watched: bool = False
    watched_till: str = ""
    franchise: str | None = None
    release_date: str | None = None
    update: str | None = None
    series_status: str | None = None
    next_season: str | None = None
    next_part: str | None = None
    expected_on: str | None = None

    def to_fields(self, config: MediaTypeConfig) -> dict[str, str]:
        """Serialize into column values keyed by the layout's column names.

        Only columns of the layout are emitted; absent values become "".

        Args:
            config (MediaTypeConfig): Target sheet layout.

        Returns:
            dict[str, str]: Column name to cell string.
        """
        values = self.model_dump(exclude={"name", "watched"})
        values[config.name_column] = self.name
        values["watched"] = "True" if self.watched else "False"
        return {column: values.get(column) or "" for column in config.columns}

    @classmethod
    def from_fields(
        cls, config: MediaTypeConfig, fields: Mapping[str, object]
    ) -> MediaRecord:
        """Rebuild a record from decoded column values.

        Args:
            config (MediaTypeConfig): Layout the values were read with.
            fields (Mapping[str, object]): Column name to cell value.

        Returns:
            MediaRecord: The record; empty cells become None.
        """
        data: dict[str, object] = {
            key: (str(value) if value not in (None, "") else None)
            for key, value in fields.items()
            if key in cls.model_fields and key not in ("name", "watched")
        }
        data["watched_till"] = fields.get("watched_till") or ""
        return cls(
            name=str(fields.get(config.name_column) or ""),
            watched=str(fields.get("watched", "")).strip().lower() == "true",
            **data,
        )

