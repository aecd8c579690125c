"""Reading the media sheets and applying user edits."""

import asyncio
from collections.abc import Awaitable, Mapping
from typing import Any

from entracker import log
from entracker.core.records import watched_sentinel
from entracker.core.sheets import (
    FIRST_DATA_ROW,
    SheetStore,
    cell_address,
    normalize_header,
)
from entracker.core.tmdb import TMDBClient
from entracker.exceptions import (
    ColumnNotFoundError,
    FranchiseNotFoundError,
    InvalidRowIndexError,
    MediaNotFoundError,
    StaleRowError,
    UnsupportedMediaTypeError,
)
from entracker.models.media import SHEET_CONFIG, STANDALONE, MediaType, MediaTypeConfig
from entracker.models.schemas.tmdb import poster_url

__all__ = ["MediaLibrary"]


class MediaLibrary:
    """Read-side queries over the media sheets plus the edit workflow."""

    def __init__(
        self,
        store: SheetStore,
        tmdb: TMDBClient,
        sheet_config: Mapping[MediaType, MediaTypeConfig] = SHEET_CONFIG,
    ) -> None:
        self.store = store
        self.tmdb = tmdb
        self.sheet_config = sheet_config

    def _movie_config(self, media_type: MediaType) -> MediaTypeConfig:
        if not media_type.is_movie_like:
            raise UnsupportedMediaTypeError("Franchises only exist for movie types.")
        return self.sheet_config[media_type]

    async def list_media(self, media_type: MediaType) -> list[dict[str, Any]]:
        """All rows of a category, decoded with the sheet's header row."""
        config = self.sheet_config[media_type]
        return await self.store.read_records(config.address_range)

    async def list_franchises(self, media_type: MediaType) -> list[str]:
        """Distinct franchise names of a movie-like category.

        Names are compared case-insensitively and the first spelling seen is
        kept; "Standalone" is excluded.

        Raises:
            UnsupportedMediaTypeError: For series-like categories.
            ColumnNotFoundError: If the sheet has no franchise column.
        """
        config = self._movie_config(media_type)
        rows = await self.store.read_all(config.address_range)
        if len(rows) <= 1:
            return []

        header = [normalize_header(cell) for cell in rows[0]]
        if "franchise" not in header:
            raise ColumnNotFoundError("'Franchise' column not found.")
        index = header.index("franchise")

        franchises: dict[str, str] = {}
        for row in rows[1:]:
            value = row[index].strip() if len(row) > index else ""
            key = value.casefold()
            if value and key != STANDALONE.casefold():
                franchises.setdefault(key, value)
        return list(franchises.values())

    async def franchise_details(
        self, media_type: MediaType, name: str
    ) -> dict[str, Any]:
        """Stored titles of a franchise together with TMDB collection info.

        Returns:
            dict[str, Any]: `{"details": {...}, "movies": [...]}`; details are
            empty when TMDB knows no matching collection.

        Raises:
            FranchiseNotFoundError: If no stored row belongs to the franchise.
        """
        config = self._movie_config(media_type)
        records = await self.store.read_records(config.address_range)
        wanted = name.strip().casefold()
        movies = [
            record
            for record in records
            if str(record.get("franchise") or "").strip().casefold() == wanted
        ]
        if not movies:
            raise FranchiseNotFoundError(
                "No movies found for this franchise in the sheet."
            )

        details: dict[str, Any] = {}
        collection_ref = await self.tmdb.search_collection(name)
        if collection_ref is not None:
            collection = await self.tmdb.fetch_collection(collection_ref.id)
            details = {
                "overview": collection.overview,
                "poster_path": poster_url(collection.poster_path),
                "name": collection.name,
            }
        return {"details": details, "movies": movies}

    async def media_details(self, media_type: MediaType, name: str) -> dict[str, Any]:
        """Display details of the best TMDB match for a stored title.

        Raises:
            MediaNotFoundError: If TMDB has no match.
        """
        results = await self.tmdb.search(media_type, name)
        if not results:
            raise MediaNotFoundError("Media not found on TMDB.")

        details = await self.tmdb.fetch_details(
            media_type, results[0].id, with_providers=True
        )
        return {
            "name": details.name,
            "overview": details.overview,
            "poster_path": poster_url(details.poster_path),
            "vote_average": details.vote_average,
            "genres": details.genres,
            "providers": [p.model_dump() for p in details.providers],
        }

    async def update_media(
        self,
        row_index: int,
        media_type: MediaType,
        *,
        name: str | None = None,
        watched: bool | None = None,
        watched_till: str | None = None,
        expected_name: str | None = None,
    ) -> int:
        """Apply a sparse edit to one row.

        Each changed field is written to its own cell and all writes are
        awaited together; the request fails if any write fails. For movie-like
        categories a watched change also rewrites watched-till, and a
        free-text watched-till is ignored.

        Args:
            row_index (int): 1-based sheet row of the title.
            media_type (MediaType): Category of the row.
            name (str | None): New title.
            watched (bool | None): New watched flag.
            watched_till (str | None): New progress descriptor (series-like).
            expected_name (str | None): Current title of the row; when given the
                row is re-read and the edit refused if it holds another title.

        Returns:
            int: Number of cells written.

        Raises:
            InvalidRowIndexError: If the row index points at the header or above.
            StaleRowError: If the row no longer holds `expected_name`.
        """
        if row_index < FIRST_DATA_ROW:
            raise InvalidRowIndexError(f"Row {row_index} is not a data row.")

        config = self.sheet_config[media_type]
        if expected_name is not None:
            await self._check_row_name(config, row_index, expected_name)

        writes: list[Awaitable[None]] = []

        def write(column: str, value: Any) -> None:
            writes.append(
                self.store.update_cell(cell_address(config, column, row_index), value)
            )

        if name:
            write(config.name_column, name)
        if watched is not None:
            write("watched", watched)
            if media_type.is_movie_like:
                write("watched_till", watched_sentinel(watched))
        if watched_till and not media_type.is_movie_like:
            write("watched_till", watched_till)

        await asyncio.gather(*writes)
        log.info(
            f"Updated {len(writes)} cell(s) of row {row_index} in {config.sheet_name}"
        )
        return len(writes)

    async def _check_row_name(
        self, config: MediaTypeConfig, row_index: int, expected_name: str
    ) -> None:
        address = cell_address(config, config.name_column, row_index)
        rows = await self.store.read_all(address)
        current = rows[0][0] if rows and rows[0] else ""
        if current.strip().casefold() != expected_name.strip().casefold():
            raise StaleRowError(
                f'Row {row_index} now holds "{current}", not "{expected_name}".'
            )
