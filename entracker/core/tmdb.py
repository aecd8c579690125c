"""TMDB Client."""

from typing import Any

import aiohttp

from entracker import __version__, log
from entracker.exceptions import MetadataNotConfiguredError, UpstreamUnavailableError
from entracker.models.media import MediaType
from entracker.models.schemas.tmdb import (
    Collection,
    CollectionPart,
    CollectionRef,
    MediaDetails,
    SearchResult,
)

__all__ = ["TMDBClient"]


class TMDBClient:
    """Client for the TMDB v3 REST API.

    Read-only lookups: title search, movie/TV details, collections. All
    requests share one aiohttp session. Every call is attempted exactly once.
    """

    DEFAULT_BASE_URL = "https://api.themoviedb.org/3"

    def __init__(self, api_key: str | None, base_url: str | None = None) -> None:
        """Initialize the TMDB client.

        Args:
            api_key (str | None): TMDB v3 API key; lookups fail without one.
            base_url (str | None): API root, mainly overridden in tests.
        """
        self.api_key = api_key
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            aiohttp.ClientSession: The active session for making HTTP requests.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"Entracker/{__version__}",
                }
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _make_request(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Perform a GET request against the TMDB API.

        Args:
            path (str): Endpoint path below the API root, e.g. "/search/movie".
            params (dict[str, Any] | None): Extra query parameters.

        Returns:
            dict[str, Any]: Decoded JSON body.

        Raises:
            MetadataNotConfiguredError: If no API key is configured.
            UpstreamUnavailableError: If TMDB is unreachable or answers non-2xx.
        """
        if not self.api_key:
            raise MetadataNotConfiguredError("TMDB key not configured.")

        query = {"api_key": self.api_key, **(params or {})}
        session = await self._get_session()

        try:
            async with session.get(f"{self.base_url}{path}", params=query) as response:
                if response.status >= 400:
                    body = await response.text()
                    log.error(
                        f"TMDB request to $$'{path}'$$ failed with status "
                        f"{response.status}: {body[:200]}"
                    )
                    raise UpstreamUnavailableError(
                        f"TMDB returned status {response.status}"
                    )
                return await response.json()
        except (TimeoutError, aiohttp.ClientError) as e:
            log.error(f"Connection error while requesting $$'{path}'$$ from TMDB")
            raise UpstreamUnavailableError("Failed to reach TMDB") from e

    async def search(self, media_type: MediaType, name: str) -> list[SearchResult]:
        """Search TMDB for titles of a category.

        Args:
            media_type (MediaType): Category; selects the movie or TV index.
            name (str): Free-text title query.

        Returns:
            list[SearchResult]: Matches in TMDB's relevance order, possibly empty.
        """
        data = await self._make_request(
            f"/search/{media_type.tmdb_kind}", {"query": name}
        )
        results = [SearchResult.from_api(item) for item in data.get("results") or []]
        log.debug(f"Search for $$'{name}'$$ returned {len(results)} result(s)")
        return results

    async def fetch_details(
        self, media_type: MediaType, tmdb_id: int, with_providers: bool = False
    ) -> MediaDetails:
        """Fetch a movie or TV show by TMDB id.

        Args:
            media_type (MediaType): Category; selects the movie or TV endpoint.
            tmdb_id (int): TMDB identifier.
            with_providers (bool): Also fetch streaming providers.

        Returns:
            MediaDetails: Projected details, including the collection if any.
        """
        params = {"append_to_response": "watch/providers"} if with_providers else None
        data = await self._make_request(f"/{media_type.tmdb_kind}/{tmdb_id}", params)
        return MediaDetails.from_api(data)

    async def fetch_collection(self, collection_id: int) -> Collection:
        """Fetch a collection and its member titles."""
        data = await self._make_request(f"/collection/{collection_id}")
        return Collection.from_api(data)

    async def fetch_collection_members(
        self, collection_id: int
    ) -> list[CollectionPart]:
        """Fetch all titles TMDB associates with a collection."""
        return (await self.fetch_collection(collection_id)).parts

    async def search_collection(self, name: str) -> CollectionRef | None:
        """Find the best matching collection for a franchise name.

        Returns:
            CollectionRef | None: The first search hit, if any.
        """
        data = await self._make_request("/search/collection", {"query": name})
        results = data.get("results") or []
        if not results:
            return None
        return CollectionRef(id=results[0]["id"], name=results[0].get("name") or name)
