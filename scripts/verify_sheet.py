#!/usr/bin/env python3

"""Verify spreadsheet access and the header row of every media sheet."""

import argparse
import asyncio
import sys
from collections.abc import Mapping
from functools import partial
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from entracker import log
from entracker.config.settings import get_config
from entracker.core.sheets import SheetStore, load_credentials, normalize_header
from entracker.models.media import SHEET_CONFIG, MediaType, MediaTypeConfig


async def check_headers(
    store: SheetStore,
    sheet_config: Mapping[MediaType, MediaTypeConfig] = SHEET_CONFIG,
    media_types: list[MediaType] | None = None,
) -> dict[MediaType, list[str]]:
    """Read each sheet's header row and list the columns it lacks.

    Args:
        store (SheetStore): Store to read through.
        sheet_config (Mapping[MediaType, MediaTypeConfig]): Expected layouts.
        media_types (list[MediaType] | None): Sheets to check; all by default.

    Returns:
        dict[MediaType, list[str]]: Missing column names per checked sheet.
    """
    missing: dict[MediaType, list[str]] = {}
    for media_type in media_types or list(sheet_config):
        config = sheet_config[media_type]
        header_range = f"'{config.sheet_name}'!1:1"
        rows = await store.read_all(header_range)
        cells = rows[0] if rows else []
        header = {normalize_header(cell) for cell in cells}
        missing[media_type] = [c for c in config.columns if c not in header]
        log.info(f"VerifySheet: $$'{config.sheet_name}'$$ headers: {cells}")
    return missing


async def run(media_types: list[MediaType] | None) -> int:
    config = get_config()
    store = SheetStore(
        config.spreadsheet_id,
        credentials_loader=partial(
            load_credentials,
            config.google_credentials_base64.get_secret_value()
            if config.google_credentials_base64
            else None,
            config.google_credentials_path,
        ),
    )

    missing = await check_headers(store, media_types=media_types)
    ok = True
    for media_type, columns in missing.items():
        if columns:
            ok = False
            log.error(
                f"VerifySheet: {SHEET_CONFIG[media_type].sheet_name} is missing "
                f"columns: {', '.join(columns)}"
            )
    if ok:
        log.success("VerifySheet: All checked sheets are reachable and complete")
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for verifying the spreadsheet layout."""
    parser = argparse.ArgumentParser(
        description="Check access to the media spreadsheet and its header rows"
    )
    parser.add_argument(
        "--media-type",
        "-m",
        action="append",
        type=MediaType,
        choices=list(MediaType),
        help="Sheet to check (repeatable); all sheets by default",
    )
    args = parser.parse_args(argv)

    try:
        return asyncio.run(run(args.media_type))
    except Exception as e:
        log.error(f"VerifySheet: Failed to read the spreadsheet: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
