"""AI field synthesis through an OpenAI-compatible chat completion API."""

from datetime import date
from typing import Any

import openai
from openai import AsyncOpenAI

from entracker import log
from entracker.exceptions import (
    MalformedOracleOutputError,
    OracleNotConfiguredError,
    UpstreamUnavailableError,
)
from entracker.models.media import MediaType
from entracker.utils.json_extract import extract_json_object

__all__ = ["FieldSynthesizer", "build_prompt", "normalize_status"]

COMPLETED = "Completed"
ON_GOING = "On Going"
FINISHED_SYNONYMS = ("complete", "finish", "final", "ended")

SYSTEM_PROMPT = (
    "You are a media information assistant and data extraction API. Your ONLY "
    "response must be a single JSON object with exactly the requested keys. Do "
    "not include markdown, explanations, or any text outside of the JSON. "
    "Current date: {today}."
)
EXPECTED_ON_KEY = (
    '"expected_on" (string, "Month YYYY" for an announced future release, '
    '"Available" if already released, or "N/A")'
)


def normalize_status(value: Any) -> str:
    """Collapse a free-text airing status to "Completed" or "On Going".

    Anything that mentions a finished-synonym counts as completed; everything
    else, including a missing value, is on going.
    """
    text = value.casefold() if isinstance(value, str) else ""
    if any(word in text for word in FINISHED_SYNONYMS):
        return COMPLETED
    return ON_GOING


def build_prompt(
    media_type: MediaType, name: str, today: date | None = None
) -> list[dict[str, str]]:
    """Build the system/user message pair for one title.

    Args:
        media_type (MediaType): Category of the title.
        name (str): Canonical title.
        today (date | None): Reference date given to the model.

    Returns:
        list[dict[str, str]]: Chat messages.
    """
    today = today or date.today()
    if media_type.is_movie_like:
        keys = f'"next_part" (string, "Yes" or "No"), {EXPECTED_ON_KEY}.'
    else:
        keys = (
            '"series_status" (string, "On Going" or "Completed"), '
            '"next_season" (string, "Yes" or "No"), '
            f"{EXPECTED_ON_KEY}."
        )
    category = media_type.value.replace("_", " ")
    return [
        {"role": "system", "content": SYSTEM_PROMPT.format(today=today.isoformat())},
        {
            "role": "user",
            "content": f'Get details for the {category}: "{name}". JSON keys: {keys}',
        },
    ]


class FieldSynthesizer:
    """Asks a completion model for status fields of a title.

    The model output is untrusted text: the JSON object is extracted
    defensively and only string values are kept.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        model: str = "sonar-pro",
    ) -> None:
        """Initialize the synthesizer.

        Args:
            api_key (str | None): Key for the completion API.
            base_url (str | None): Root of the OpenAI-compatible API.
            model (str): Model name passed to every completion call.
        """
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise OracleNotConfiguredError("AI completion key not configured.")
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Send one non-streaming completion request and return its text.

        Raises:
            UpstreamUnavailableError: If the API call fails.
            MalformedOracleOutputError: If the response has no content.
        """
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model, messages=messages
            )
        except openai.APIError as e:
            log.error(f"Completion request failed: {e}")
            raise UpstreamUnavailableError("Failed to reach the AI service") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise MalformedOracleOutputError("No content in AI response")
        return content

    async def synthesize(self, media_type: MediaType, name: str) -> dict[str, str]:
        """Get the status fields of a title from the model.

        Args:
            media_type (MediaType): Category; selects the requested keys.
            name (str): Canonical title.

        Returns:
            dict[str, str]: String-valued fields from the model's JSON object.

        Raises:
            MalformedOracleOutputError: If the output holds no usable JSON object.
        """
        content = await self.complete(build_prompt(media_type, name))
        log.debug(f"Raw AI content for $$'{name}'$$: {content}")
        try:
            data = extract_json_object(content)
        except MalformedOracleOutputError:
            log.error(f"Failed to parse AI response for $$'{name}'$$: {content!r}")
            raise

        fields = {
            key: value if isinstance(value, str) else str(value)
            for key, value in data.items()
            if value is not None and not isinstance(value, (dict, list))
        }
        if "series_status" in fields:
            fields["series_status"] = normalize_status(fields.get("series_status"))
        return fields
