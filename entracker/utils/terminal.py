"""Terminal capability detection."""

import locale
import os
import sys
from functools import lru_cache

import colorama

__all__ = ["supports_color", "supports_utf8"]


@lru_cache(maxsize=1)
def supports_utf8() -> bool:
    """Check whether stdout can render UTF-8 box-drawing characters.

    Returns:
        bool: True if the stdout encoding is a UTF variant
    """
    encoding = sys.stdout.encoding or locale.getpreferredencoding(False)
    return encoding.lower().startswith("utf")


@lru_cache(maxsize=1)
def supports_color() -> bool:
    """Check whether stdout is a terminal that understands ANSI colors.

    `NO_COLOR` always disables colors. On Windows, colors are only assumed when
    colorama patched the console or a known ANSI-capable host is detected.

    Returns:
        bool: True if colored output should be used
    """
    if "NO_COLOR" in os.environ:
        return False
    if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
        return False

    if sys.platform == "win32":
        return (
            getattr(colorama, "fixed_windows_console", False)
            or "ANSICON" in os.environ
            or "WT_SESSION" in os.environ
            or os.environ.get("TERM_PROGRAM") == "vscode"
        )

    return os.environ.get("TERM") != "dumb"
