"""Global web application state utilities.

Holds the long-lived clients (TMDB, completion model, spreadsheet) and the
workflows built on them, shared by all route handlers.
"""

from contextlib import suppress
from datetime import UTC, datetime
from functools import lru_cache, partial

from entracker import log
from entracker.config.settings import EntrackerConfig, get_config
from entracker.core.franchise import FranchiseReconciler
from entracker.core.library import MediaLibrary
from entracker.core.oracle import FieldSynthesizer
from entracker.core.sheets import SheetStore, load_credentials
from entracker.core.tmdb import TMDBClient

__all__ = ["AppState", "get_app_state"]


def _secret(value) -> str | None:
    return value.get_secret_value() if value is not None else None


class AppState:
    """Container for global web application state."""

    def __init__(self) -> None:
        """Initialize empty state containers and record process start time."""
        self.tmdb: TMDBClient | None = None
        self.synthesizer: FieldSynthesizer | None = None
        self.store: SheetStore | None = None
        self.reconciler: FranchiseReconciler | None = None
        self.library: MediaLibrary | None = None
        self.started_at: datetime = datetime.now(UTC)

    def configure(self, config: EntrackerConfig | None = None) -> None:
        """Build any client or workflow that has not been set yet.

        Args:
            config (EntrackerConfig | None): Settings; defaults to the global one.
        """
        config = config or get_config()
        if self.tmdb is None:
            self.tmdb = TMDBClient(_secret(config.tmdb_api_key), config.tmdb_base_url)
        if self.synthesizer is None:
            self.synthesizer = FieldSynthesizer(
                _secret(config.openai_api_key),
                base_url=config.openai_base_url,
                model=config.openai_model,
            )
        if self.store is None:
            self.store = SheetStore(
                config.spreadsheet_id,
                credentials_loader=partial(
                    load_credentials,
                    _secret(config.google_credentials_base64),
                    config.google_credentials_path,
                ),
            )
        if self.reconciler is None:
            self.reconciler = FranchiseReconciler(
                self.tmdb, self.synthesizer, self.store
            )
        if self.library is None:
            self.library = MediaLibrary(self.store, self.tmdb)

    def get_tmdb(self) -> TMDBClient:
        """Get the TMDB client, building it on first use."""
        if self.tmdb is None:
            self.configure()
        return self.tmdb

    def get_reconciler(self) -> FranchiseReconciler:
        """Get the franchise reconciler, building it on first use."""
        if self.reconciler is None:
            self.configure()
        return self.reconciler

    def get_library(self) -> MediaLibrary:
        """Get the media library, building it on first use."""
        if self.library is None:
            self.configure()
        return self.library

    async def shutdown(self) -> None:
        """Finish background work and close network clients."""
        if self.reconciler is not None and self.reconciler.pending_tasks:
            log.info(
                f"Web: Waiting for {self.reconciler.pending_tasks} franchise "
                "population task(s)"
            )
            await self.reconciler.drain()

        for client in (self.tmdb, self.synthesizer):
            if client is not None:
                with suppress(Exception):
                    await client.close()


@lru_cache(maxsize=1)
def get_app_state() -> AppState:
    """Get the singleton application state instance.

    Returns:
        AppState: The application state instance.
    """
    return AppState()
