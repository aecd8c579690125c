"""Shared pytest configuration and fixtures for the test suite."""

import atexit
import os
import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="entracker-tests-"))
os.environ["ENTRACKER_DATA_PATH"] = str(_TEST_DATA_DIR)
_TEST_CONFIG_FILE = _TEST_DATA_DIR / "config.yaml"

# Environment values would override the YAML file below
for _name in (
    "SPREADSHEET_ID",
    "TMDB_API_KEY",
    "OPENAI_API_KEY",
    "GOOGLE_CREDENTIALS_BASE64",
    "LOG_LEVEL",
):
    os.environ.pop(_name, None)

_TEST_CONFIG_FILE.write_text(
    yaml.safe_dump(
        {
            "spreadsheet_id": "test-spreadsheet",
            "tmdb_api_key": "tmdb-key",
            "openai_api_key": "openai-key",
            "log_level": "INFO",
        },
        sort_keys=False,
    ),
    encoding="utf-8",
)

from entracker.config import settings as settings_module  # noqa: E402
from entracker.web.state import get_app_state  # noqa: E402

settings_module.get_config.cache_clear()


@pytest.fixture(autouse=True)
def _reset_app_state():
    """Ensure each test interacts with a fresh AppState instance."""
    get_app_state.cache_clear()
    state = get_app_state()
    yield state
    get_app_state.cache_clear()


@atexit.register
def _cleanup_test_data_dir() -> None:
    """Remove the temporary test data directory after the test session."""
    shutil.rmtree(_TEST_DATA_DIR, ignore_errors=True)
