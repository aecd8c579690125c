"""Shared request/response models for the HTTP routes."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from entracker.exceptions import RequestFieldsError
from entracker.models.media import MediaType

__all__ = ["CamelModel", "DataResponse", "MessageResponse", "parse_media_type"]


class CamelModel(BaseModel):
    """Model accepting camelCase keys as sent by the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def require(self, *fields: str) -> None:
        """Fail with a 400 if any of the named fields is missing.

        Raises:
            RequestFieldsError: Naming the fields by their camelCase keys.
        """
        missing = [
            to_camel(field) for field in fields if getattr(self, field) in (None, "")
        ]
        if missing:
            raise RequestFieldsError(
                f"Missing required field(s): {', '.join(missing)}."
            )


class MessageResponse(BaseModel):
    message: str


class DataResponse(BaseModel):
    data: Any


def parse_media_type(value: str) -> MediaType:
    """Resolve a path or query category name (400 if unknown)."""
    return MediaType.parse(value)
