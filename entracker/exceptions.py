"""Entracker exception classes."""


class EntrackerError(Exception):
    """Base class for all Entracker exceptions."""

    # Default HTTP status for API responses
    status_code: int = 500


# Request errors
class RequestError(EntrackerError):
    """Base class for malformed or incomplete client requests."""

    status_code = 400


class RequestFieldsError(RequestError, ValueError):
    """One or more required request fields are missing."""

    status_code = 400


class InvalidRowIndexError(RequestError, ValueError):
    """Row index does not address a data row of the sheet."""

    status_code = 400


# Media/model errors
class MediaTypeError(EntrackerError):
    """Base class for media type related errors."""

    status_code = 400


class UnsupportedMediaTypeError(MediaTypeError, ValueError):
    """The media type is unknown or not valid for the requested operation."""

    status_code = 400


# Lookup and conflict errors
class MediaNotFoundError(EntrackerError, LookupError):
    """No matching title was found on TMDB."""

    status_code = 404


class FranchiseNotFoundError(EntrackerError, LookupError):
    """No stored rows belong to the requested franchise."""

    status_code = 404


class ConflictError(EntrackerError):
    """Base class for requests that conflict with the stored state."""

    status_code = 409


class MediaAlreadyExistsError(ConflictError):
    """The title is already present in the sheet."""

    status_code = 409


class AmbiguousMediaError(ConflictError):
    """A name search matched several titles and needs disambiguation."""

    status_code = 409

    def __init__(self, message: str, candidates: list | None = None) -> None:
        """Initialize the error with the candidate titles.

        Args:
            message (str): Human-readable error message.
            candidates (list | None): Search results the caller can choose from.
        """
        super().__init__(message)
        self.candidates = candidates or []


class StaleRowError(ConflictError):
    """The addressed row no longer holds the expected title."""

    status_code = 409


# Configuration errors
class ConfigError(EntrackerError):
    """Base class for configuration-related errors."""

    status_code = 500


class MetadataNotConfiguredError(ConfigError):
    """The TMDB API key is not configured."""

    status_code = 500


class OracleNotConfiguredError(ConfigError):
    """The AI completion API key is not configured."""

    status_code = 500


class StoreNotConfiguredError(ConfigError):
    """The spreadsheet identifier or credentials are not configured."""

    status_code = 500


# Upstream service errors
class UpstreamError(EntrackerError):
    """Base class for failures of external services."""

    status_code = 500


class UpstreamUnavailableError(UpstreamError):
    """The metadata or completion service is unreachable or returned non-2xx."""

    status_code = 500


class MalformedOracleOutputError(UpstreamError, ValueError):
    """The completion text does not contain the expected JSON object."""

    status_code = 500


# Store errors
class StoreError(EntrackerError):
    """Base class for spreadsheet storage failures."""

    status_code = 500


class StoreUnavailableError(StoreError):
    """The spreadsheet could not be read or written."""

    status_code = 500


class ColumnNotFoundError(StoreError, KeyError):
    """An expected header column is missing from the sheet."""

    status_code = 500

    def __str__(self) -> str:
        """Return the message without KeyError's quoting."""
        return str(self.args[0]) if self.args else ""
