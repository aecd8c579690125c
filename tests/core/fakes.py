"""Test doubles for the TMDB client, completion model and sheet store."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from entracker.core.sheets import decode_rows, to_cell
from entracker.exceptions import StoreUnavailableError, UpstreamUnavailableError
from entracker.models.media import SHEET_CONFIG, MediaType
from entracker.models.schemas.tmdb import (
    Collection,
    CollectionPart,
    CollectionRef,
    MediaDetails,
    SearchResult,
)


class FakeTMDBClient:
    """In-memory TMDB with call recording."""

    def __init__(
        self,
        details: dict[int, MediaDetails] | None = None,
        collections: dict[int, Collection] | None = None,
        search_results: dict[str, list[SearchResult]] | None = None,
    ) -> None:
        self.details = details or {}
        self.collections = collections or {}
        self.search_results = search_results or {}
        self.calls: list[tuple[str, Any]] = []
        self.collection_gate: asyncio.Event | None = None
        self.fail_collection = False

    async def search(self, media_type: MediaType, name: str) -> list[SearchResult]:
        self.calls.append(("search", name))
        return list(self.search_results.get(name, []))

    async def fetch_details(
        self, media_type: MediaType, tmdb_id: int, with_providers: bool = False
    ) -> MediaDetails:
        self.calls.append(("details", tmdb_id))
        return self.details[tmdb_id]

    async def fetch_collection(self, collection_id: int) -> Collection:
        self.calls.append(("collection", collection_id))
        if self.collection_gate is not None:
            await self.collection_gate.wait()
        if self.fail_collection:
            raise UpstreamUnavailableError("TMDB returned status 503")
        return self.collections[collection_id]

    async def fetch_collection_members(
        self, collection_id: int
    ) -> list[CollectionPart]:
        return (await self.fetch_collection(collection_id)).parts

    async def search_collection(self, name: str) -> CollectionRef | None:
        self.calls.append(("search_collection", name))
        for collection in self.collections.values():
            if collection.name.lower().startswith(name.lower()):
                return CollectionRef(id=collection.id, name=collection.name)
        return None

    async def close(self) -> None:
        """No-op close hook."""


class FakeSynthesizer:
    """Completion model stand-in returning fixed fields."""

    def __init__(
        self, fields: dict[str, str] | None = None, error: Exception | None = None
    ) -> None:
        self.fields = fields if fields is not None else {"next_part": "No"}
        self.error = error
        self.calls: list[tuple[MediaType, str]] = []

    async def synthesize(self, media_type: MediaType, name: str) -> dict[str, str]:
        self.calls.append((media_type, name))
        if self.error is not None:
            raise self.error
        return dict(self.fields)

    async def close(self) -> None:
        """No-op close hook."""


class FakeSheetStore:
    """Spreadsheet stand-in keyed by A1 range.

    Tables are stored as lists of cell strings, header first; values pass
    through `to_cell` like the real store.
    """

    def __init__(self, tables: dict[str, list[list[str]]] | None = None) -> None:
        self.tables = tables or {}
        self.cells: dict[str, str] = {}
        self.appends: list[tuple[str, list[list[str]]]] = []
        self.updates: list[tuple[str, str]] = []
        self.fail_reads = False
        self.fail_appends_after: int | None = None
        self.fail_addresses: set[str] = set()

    @classmethod
    def with_rows(cls, media_type: MediaType, *rows: Sequence[str]) -> FakeSheetStore:
        """Create a store whose sheet for `media_type` holds the given rows."""
        config = SHEET_CONFIG[media_type]
        header = [column.replace("_", " ").title() for column in config.columns]
        return cls({config.address_range: [header, *[list(row) for row in rows]]})

    async def read_all(self, address_range: str) -> list[list[str]]:
        if self.fail_reads:
            raise StoreUnavailableError(f"Failed to read {address_range}")
        if address_range in self.cells:
            return [[self.cells[address_range]]]
        return [list(row) for row in self.tables.get(address_range, [])]

    async def read_records(self, address_range: str) -> list[dict[str, Any]]:
        return decode_rows(await self.read_all(address_range))

    async def append(self, address_range: str, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            return
        if (
            self.fail_appends_after is not None
            and len(self.appends) >= self.fail_appends_after
        ):
            raise StoreUnavailableError(f"Failed to append to {address_range}")
        values = [[to_cell(cell) for cell in row] for row in rows]
        self.appends.append((address_range, values))
        self.tables.setdefault(address_range, []).extend(values)

    async def update_cell(self, address: str, value: Any) -> None:
        await asyncio.sleep(0)
        if address in self.fail_addresses:
            raise StoreUnavailableError(f"Failed to update {address}")
        self.updates.append((address, to_cell(value)))
        self.cells[address] = to_cell(value)
