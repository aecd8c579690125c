"""Google Sheets storage adapter."""

import asyncio
import base64
import binascii
import json
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

import gspread
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1

from entracker import log
from entracker.exceptions import StoreNotConfiguredError, StoreUnavailableError
from entracker.models.media import MediaTypeConfig

__all__ = [
    "SheetStore",
    "cell_address",
    "decode_rows",
    "load_credentials",
    "normalize_header",
    "to_cell",
]

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
VALUE_INPUT_OPTION = "USER_ENTERED"
# Sheet row of the first data row: rows are 1-based and row 1 is the header
FIRST_DATA_ROW = 2

T = TypeVar("T")

_STORE_ERRORS = (
    gspread.exceptions.GSpreadException,
    GoogleAuthError,
    requests.exceptions.RequestException,
)


def to_cell(value: Any) -> str:
    """Serialize a value into a sheet cell string.

    Booleans become "True"/"False" and missing values an empty cell.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


def normalize_header(header: str) -> str:
    """Turn a header cell like "Movies Name" into the key "movies_name"."""
    return str(header).strip().lower().replace(" ", "_")


def decode_rows(rows: Sequence[Sequence[Any]]) -> list[dict[str, Any]]:
    """Re-key positional rows into dictionaries using the header row.

    Every decoded row carries a synthetic `row_index`, its 1-based sheet row,
    for use in later update calls. Short rows are padded with empty strings.

    Args:
        rows (Sequence[Sequence[Any]]): Sheet values, header first.

    Returns:
        list[dict[str, Any]]: One mapping per data row.
    """
    if not rows:
        return []

    header = [normalize_header(cell) for cell in rows[0]]
    records: list[dict[str, Any]] = []
    for offset, row in enumerate(rows[1:]):
        record: dict[str, Any] = {"row_index": offset + FIRST_DATA_ROW}
        for i, key in enumerate(header):
            if key:
                record[key] = row[i] if i < len(row) else ""
        records.append(record)
    return records


def cell_address(config: MediaTypeConfig, column: str, row_index: int) -> str:
    """A1 address of one cell, e.g. `'Anime Movies'!C14`.

    Args:
        config (MediaTypeConfig): Sheet layout holding the column.
        column (str): Column name from the layout.
        row_index (int): 1-based sheet row.

    Returns:
        str: Quoted-sheet A1 address.
    """
    cell = rowcol_to_a1(row_index, config.column_index(column) + 1)
    return f"'{config.sheet_name}'!{cell}"


def load_credentials(
    credentials_base64: str | None, credentials_path: Path | str | None
) -> Credentials:
    """Load service account credentials.

    The base64 value (packaged deployments) wins over the key file (local
    development).

    Raises:
        StoreNotConfiguredError: If neither source yields usable credentials.
    """
    if credentials_base64:
        try:
            info = json.loads(base64.b64decode(credentials_base64).decode("utf-8"))
            return Credentials.from_service_account_info(info, scopes=SCOPES)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            raise StoreNotConfiguredError(
                "GOOGLE_CREDENTIALS_BASE64 is not valid base64-encoded JSON"
            ) from e

    if not credentials_path or not Path(credentials_path).is_file():
        raise StoreNotConfiguredError(
            f"Google credentials file not found: {credentials_path}"
        )
    try:
        return Credentials.from_service_account_file(
            str(credentials_path), scopes=SCOPES
        )
    except ValueError as e:
        raise StoreNotConfiguredError(
            f"Google credentials file is invalid: {credentials_path}"
        ) from e


class SheetStore:
    """Row-oriented access to the media spreadsheet.

    gspread is synchronous, so each call runs in a worker thread to keep the
    event loop free. Writes use the USER_ENTERED input option, like typing
    into the sheet.
    """

    def __init__(
        self,
        spreadsheet_id: str | None,
        credentials_loader: Callable[[], Credentials] | None = None,
        spreadsheet: gspread.Spreadsheet | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            spreadsheet_id (str | None): Key of the Google spreadsheet.
            credentials_loader (Callable[[], Credentials] | None): Produces
                credentials on first use.
            spreadsheet (gspread.Spreadsheet | None): Already opened spreadsheet;
                skips authorization when given.
        """
        self.spreadsheet_id = spreadsheet_id
        self._credentials_loader = credentials_loader
        self._spreadsheet = spreadsheet
        self._lock = threading.Lock()

    def _open(self) -> gspread.Spreadsheet:
        with self._lock:
            if self._spreadsheet is None:
                if not self.spreadsheet_id:
                    raise StoreNotConfiguredError("SPREADSHEET_ID is not configured")
                if self._credentials_loader is None:
                    raise StoreNotConfiguredError("Google credentials not configured")
                client = gspread.authorize(self._credentials_loader())
                self._spreadsheet = client.open_by_key(self.spreadsheet_id)
                log.debug(f"Opened spreadsheet $$'{self.spreadsheet_id}'$$")
            return self._spreadsheet

    async def _call(
        self, action: str, func: Callable[[gspread.Spreadsheet], T]
    ) -> T:
        def run() -> T:
            return func(self._open())

        try:
            return await asyncio.to_thread(run)
        except _STORE_ERRORS as e:
            log.error(f"Failed to {action}: {e}")
            raise StoreUnavailableError(f"Failed to {action}") from e

    async def read_all(self, address_range: str) -> list[list[str]]:
        """Read every row of a range, header first.

        Args:
            address_range (str): A1 range such as "Movies!A:H".

        Returns:
            list[list[str]]: Rows of cell strings; empty if the range is empty.
        """
        response = await self._call(
            f"read {address_range}", lambda sheet: sheet.values_get(address_range)
        )
        return [[to_cell(cell) for cell in row] for row in response.get("values", [])]

    async def read_records(self, address_range: str) -> list[dict[str, Any]]:
        """Read a range and decode it with its header row (see `decode_rows`)."""
        return decode_rows(await self.read_all(address_range))

    async def append(self, address_range: str, rows: Sequence[Sequence[Any]]) -> None:
        """Append rows after the last row of a table in a single API call.

        Args:
            address_range (str): A1 range of the table.
            rows (Sequence[Sequence[Any]]): Rows to add; nothing is sent if empty.
        """
        if not rows:
            return
        values = [[to_cell(cell) for cell in row] for row in rows]
        await self._call(
            f"append {len(values)} row(s) to {address_range}",
            lambda sheet: sheet.values_append(
                address_range,
                params={"valueInputOption": VALUE_INPUT_OPTION},
                body={"values": values},
            ),
        )
        log.debug(f"Appended {len(values)} row(s) to $$'{address_range}'$$")

    async def update_row(self, address_range: str, values: Sequence[Any]) -> None:
        """Overwrite the cells of one row starting at `address_range`."""
        row = [to_cell(cell) for cell in values]
        await self._call(
            f"update {address_range}",
            lambda sheet: sheet.values_update(
                address_range,
                params={"valueInputOption": VALUE_INPUT_OPTION},
                body={"values": [row]},
            ),
        )

    async def update_cell(self, address: str, value: Any) -> None:
        """Overwrite a single cell."""
        await self.update_row(address, [value])
