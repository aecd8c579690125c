"""Franchise reconciliation: adding titles and back-filling their franchise."""

import asyncio
from collections.abc import Coroutine, Iterable, Mapping
from datetime import date
from typing import Any

from entracker import log
from entracker.core.oracle import FieldSynthesizer
from entracker.core.records import (
    build_record,
    expected_on_for,
    franchise_name,
    timestamp,
    to_row,
)
from entracker.core.sheets import SheetStore
from entracker.core.tmdb import TMDBClient
from entracker.exceptions import (
    AmbiguousMediaError,
    MediaAlreadyExistsError,
    MediaNotFoundError,
)
from entracker.models.media import (
    NOT_WATCHED,
    SHEET_CONFIG,
    MediaRecord,
    MediaType,
    MediaTypeConfig,
)
from entracker.models.schemas.tmdb import CollectionPart

__all__ = ["FranchiseReconciler"]


def _fold(name: str) -> str:
    return name.strip().casefold()


class FranchiseReconciler:
    """Adds titles to their sheet and fills in the rest of their franchise.

    An add resolves the title on TMDB, rejects names already in the sheet
    (case-insensitively), enriches the record through the completion model and
    appends it. For movies that belong to a TMDB collection, the other members
    are then appended in one batch by a detached task: the caller gets its
    answer as soon as the primary row is written, and failures of the
    background step are only logged.
    """

    def __init__(
        self,
        tmdb: TMDBClient,
        synthesizer: FieldSynthesizer,
        store: SheetStore,
        sheet_config: Mapping[MediaType, MediaTypeConfig] = SHEET_CONFIG,
    ) -> None:
        """Initialize the reconciler.

        Args:
            tmdb (TMDBClient): Metadata lookups.
            synthesizer (FieldSynthesizer): Completion-model enrichment.
            store (SheetStore): Spreadsheet access.
            sheet_config (Mapping[MediaType, MediaTypeConfig]): Sheet layouts.
        """
        self.tmdb = tmdb
        self.synthesizer = synthesizer
        self.store = store
        self.sheet_config = sheet_config
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending_tasks(self) -> int:
        """Number of franchise population tasks still running."""
        return len(self._tasks)

    def _create_task(self, coro: Coroutine[Any, Any, None]) -> None:
        """Create and track an asyncio task."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for all outstanding population tasks to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def add_media_by_name(
        self,
        media_type: MediaType,
        name: str,
        watched: bool,
        watched_till: str | None = None,
    ) -> MediaRecord:
        """Add a title given only its name.

        The name must resolve to exactly one TMDB result; otherwise the caller
        has to pick a candidate and add it by id.

        Raises:
            MediaNotFoundError: If the search has no results.
            AmbiguousMediaError: If the search has several results.
        """
        results = await self.tmdb.search(media_type, name)
        if not results:
            raise MediaNotFoundError(f'"{name}" was not found on TMDB.')
        if len(results) > 1:
            raise AmbiguousMediaError(
                f'"{name}" matches {len(results)} titles; pick one by id.',
                candidates=[result.model_dump() for result in results],
            )
        return await self.add_media(media_type, results[0].id, watched, watched_till)

    async def add_media(
        self,
        media_type: MediaType,
        tmdb_id: int,
        watched: bool,
        watched_till: str | None = None,
    ) -> MediaRecord:
        """Add a TMDB title to its category's sheet.

        Args:
            media_type (MediaType): Target category.
            tmdb_id (int): TMDB id of the title, as chosen by the user.
            watched (bool): Whether the user has watched it.
            watched_till (str | None): Progress descriptor for series-like titles.

        Returns:
            MediaRecord: The record that was appended.

        Raises:
            MediaAlreadyExistsError: If the title is already in the sheet.
        """
        config = self.sheet_config[media_type]

        details = await self.tmdb.fetch_details(media_type, tmdb_id)
        official_name = details.name

        existing_names = await self._existing_names(config)
        if _fold(official_name) in existing_names:
            log.info(f"$$'{official_name}'$$ is already tracked in {config.sheet_name}")
            raise MediaAlreadyExistsError(f'"{official_name}" is already in your list.')

        oracle_fields = await self.synthesizer.synthesize(media_type, official_name)
        franchise = franchise_name(details.collection)
        record = build_record(
            media_type,
            official_name,
            oracle_fields,
            watched_till,
            watched,
            franchise=franchise,
            release_date=details.release_date,
        )

        await self.store.append(config.address_range, [to_row(config, record)])
        log.success(
            f"Added $$'{official_name}'$$ to {config.sheet_name} "
            f"$${{tmdb_id: {tmdb_id}, franchise: {franchise}}}$$"
        )

        if media_type.is_movie_like and details.collection is not None:
            existing_names.add(_fold(official_name))
            self._create_task(
                self._populate_franchise(
                    config,
                    collection_id=details.collection.id,
                    franchise=franchise,
                    primary_id=details.id,
                    known_names=existing_names,
                )
            )

        return record

    async def _existing_names(self, config: MediaTypeConfig) -> set[str]:
        rows = await self.store.read_all(config.address_range)
        name_index = config.column_index(config.name_column)
        return {
            _fold(row[name_index])
            for row in rows[1:]
            if len(row) > name_index and row[name_index].strip()
        }

    def _sibling_rows(
        self,
        config: MediaTypeConfig,
        parts: Iterable[CollectionPart],
        franchise: str,
        primary_id: int,
        known_names: set[str],
    ) -> list[list[str]]:
        today = date.today()
        seen = set(known_names)
        rows: list[list[str]] = []
        for part in parts:
            folded = _fold(part.title)
            if part.id == primary_id or not folded or folded in seen:
                continue
            seen.add(folded)
            sibling = MediaRecord(
                name=part.title,
                watched=False,
                watched_till=NOT_WATCHED,
                franchise=franchise,
                next_part="Yes",
                expected_on=expected_on_for(part.release_date, today),
                release_date=part.release_date,
                update=timestamp(),
            )
            rows.append(to_row(config, sibling))
        return rows

    async def _populate_franchise(
        self,
        config: MediaTypeConfig,
        *,
        collection_id: int,
        franchise: str,
        primary_id: int,
        known_names: set[str],
    ) -> None:
        """Append the collection members that are not in the sheet yet.

        Runs detached from the request; errors are logged and swallowed, and
        the primary row stays written.
        """
        try:
            parts = await self.tmdb.fetch_collection_members(collection_id)
            rows = self._sibling_rows(
                config, parts, franchise, primary_id, known_names
            )
            if not rows:
                log.debug(f"Franchise $$'{franchise}'$$ has no missing titles")
                return
            await self.store.append(config.address_range, rows)
            log.success(
                f"Added {len(rows)} missing title(s) of franchise "
                f"$$'{franchise}'$$ to {config.sheet_name}"
            )
        except asyncio.CancelledError:
            log.info(f"Population of franchise $$'{franchise}'$$ cancelled")
            raise
        except Exception as e:
            log.error(
                f"Failed to populate franchise $$'{franchise}'$$: {e}", exc_info=True
            )
