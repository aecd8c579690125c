"""Application logger with a SUCCESS level and marker-aware formatters.

Messages may wrap values in markers: `$$'Inception'$$` highlights a title and
`$${row: 4}$$` dims secondary details. The console renders them in color when
the terminal allows it; files and plain terminals show the bare text.
"""

import logging
import re
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorama
from colorama import Fore, Style

__all__ = ["CleanFormatter", "ColorFormatter", "Logger", "get_logger"]

QUOTED_PATTERN = re.compile(r"\$\$'((?:[^']|'(?!\$\$))*)'\$\$")
BRACED_PATTERN = re.compile(r"\$\$\{(.*?)\}\$\$")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s\t%(message)s"
DEBUG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s\t%(filename)s:%(lineno)d\t%(message)s"
)

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

LEVEL_COLORS = {
    "DEBUG": Fore.CYAN,
    "INFO": Fore.GREEN,
    "SUCCESS": Fore.GREEN + Style.BRIGHT,
    "WARNING": Fore.YELLOW,
    "ERROR": Fore.RED,
    "CRITICAL": Fore.RED + Style.BRIGHT,
}


def strip_markers(message: str) -> str:
    """Remove the highlight markers from a message, keeping their content."""
    return BRACED_PATTERN.sub(r"{\1}", QUOTED_PATTERN.sub(r"'\1'", message))


def colorize_markers(message: str) -> str:
    """Replace the highlight markers of a message with ANSI colors."""
    message = QUOTED_PATTERN.sub(f"{Fore.LIGHTBLUE_EX}'\\1'{Style.RESET_ALL}", message)
    return BRACED_PATTERN.sub(f"{Style.DIM}{{\\1}}{Style.RESET_ALL}", message)


class ColorFormatter(logging.Formatter):
    """Console formatter: colored level names and colored marker values."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record, restoring it afterwards for other handlers."""
        saved = record.msg, record.levelname
        color = LEVEL_COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        if isinstance(record.msg, str):
            record.msg = colorize_markers(record.msg)
        try:
            return super().format(record)
        finally:
            record.msg, record.levelname = saved


class CleanFormatter(logging.Formatter):
    """Formatter for log files and terminals without color support."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record with its markers removed."""
        if not isinstance(record.msg, str):
            return super().format(record)

        saved = record.msg
        record.msg = strip_markers(saved)
        try:
            return super().format(record)
        finally:
            record.msg = saved


def _owner_name(frame) -> str | None:
    """Name of the class whose method (or classmethod) owns `frame`."""
    owner = frame.f_locals.get("self")
    if owner is not None and not isinstance(owner, logging.Logger):
        return type(owner).__name__
    cls = frame.f_locals.get("cls")
    return cls.__name__ if isinstance(cls, type) else None


def _enable_color() -> bool:
    """Prepare the console for ANSI colors; False when colors are unavailable."""
    from entracker.utils import terminal

    try:
        if not terminal.supports_color():
            return False
        if sys.platform == "win32":
            colorama.just_fix_windows_console()
        else:
            colorama.init()
    except (AttributeError, ImportError, OSError):
        return False
    return True


class Logger(logging.Logger):
    """Logger that prefixes messages with the calling class.

    `self.log.info("Added")` inside `FranchiseReconciler` is emitted as
    "FranchiseReconciler: Added". Adds a SUCCESS level between INFO and
    WARNING for completed writes.
    """

    SUCCESS = logging.INFO + 5

    def __init__(self, name: str, level: int = logging.NOTSET) -> None:
        super().__init__(name, level)
        if logging.getLevelName(self.SUCCESS) != "SUCCESS":
            logging.addLevelName(self.SUCCESS, "SUCCESS")

    def _log(
        self,
        level,
        msg,
        args,
        exc_info=None,
        extra=None,
        stack_info=False,
        stacklevel=1,
    ):
        # Frame 2 is the code that called info()/debug()/...
        if isinstance(msg, str):
            try:
                class_name = _owner_name(sys._getframe(2))
            except ValueError:
                class_name = None
            if class_name:
                msg = f"{class_name}: {msg}"

        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )

    def success(self, msg, *args, **kwargs):
        """Log `msg` at SUCCESS level."""
        if self.isEnabledFor(self.SUCCESS):
            self._log(self.SUCCESS, msg, args, **kwargs)

    def setup(self, log_level: str, log_dir: str | None = None) -> None:
        """Replace the handlers with a console handler and an optional log file.

        Args:
            log_level (str): Level name, including the custom "SUCCESS".
            log_dir (str | None): Directory for `<name>.<level>.log`; no file
                is written when omitted.
        """
        level = self.SUCCESS if log_level == "SUCCESS" else getattr(logging, log_level)
        self.setLevel(level)
        for handler in list(self.handlers):
            self.removeHandler(handler)

        log_format = DEBUG_FORMAT if level <= logging.DEBUG else PLAIN_FORMAT
        handlers: list[logging.Handler] = []

        if log_dir is not None:
            directory = Path(log_dir)
            directory.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                directory / f"{self.name}.{log_level}.log",
                maxBytes=MAX_LOG_BYTES,
                backupCount=LOG_BACKUPS,
                encoding="utf-8",
            )
            file_handler.setFormatter(CleanFormatter(log_format, datefmt=DATE_FORMAT))
            handlers.append(file_handler)

        console_cls = ColorFormatter if _enable_color() else CleanFormatter
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_cls(log_format, datefmt=DATE_FORMAT))
        handlers.append(console_handler)

        for handler in handlers:
            handler.setLevel(level)
            self.addHandler(handler)


logging.setLoggerClass(Logger)


def _get_logger(
    log_name: str, log_level: str = "INFO", log_dir: str | Path | None = None
) -> Logger:
    """Return the named logger, set up with the given level and log directory."""
    logger = logging.getLogger(log_name)
    if not isinstance(logger, Logger):
        logger = Logger(log_name)
    logger.setup(log_level, str(log_dir) if log_dir is not None else None)
    return logger


@lru_cache(maxsize=1)
def get_logger() -> Logger:
    """The "Entracker" logger, writing files under `<data_path>/logs`."""
    from entracker.config.settings import get_config

    config = get_config()
    return _get_logger(
        "Entracker", log_level=str(config.log_level), log_dir=config.data_path / "logs"
    )
