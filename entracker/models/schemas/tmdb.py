"""Projections of TMDB API payloads.

Only the fields Entracker reads are modelled; everything else TMDB returns is
ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Collection",
    "CollectionPart",
    "CollectionRef",
    "MediaDetails",
    "SearchResult",
    "WatchProvider",
    "poster_url",
]

IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
PROVIDER_REGIONS = ("US", "IN")


def poster_url(path: str | None) -> str | None:
    """Expand a TMDB image path into a full poster URL."""
    return f"{IMAGE_BASE_URL}{path}" if path else None


class TMDBModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SearchResult(TMDBModel):
    """A title returned by a movie or TV search."""

    id: int
    name: str
    release_date: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> SearchResult:
        return cls(
            id=item["id"],
            name=item.get("title") or item.get("name") or "",
            release_date=item.get("release_date") or item.get("first_air_date") or None,
        )


class CollectionRef(TMDBModel):
    """The collection (franchise) a movie belongs to."""

    id: int
    name: str


class WatchProvider(TMDBModel):
    provider_id: int | None = None
    provider_name: str
    logo_path: str | None = None


class MediaDetails(TMDBModel):
    """Details of a single movie or TV show."""

    id: int
    name: str
    overview: str | None = None
    poster_path: str | None = None
    vote_average: float | None = None
    genres: list[str] = Field(default_factory=list)
    release_date: str | None = None
    collection: CollectionRef | None = None
    providers: list[WatchProvider] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> MediaDetails:
        """Project a `/movie/{id}` or `/tv/{id}` response.

        Streaming providers come from the appended `watch/providers` block; US
        flatrate offers are preferred, then IN.
        """
        collection = data.get("belongs_to_collection")
        regions = (data.get("watch/providers") or {}).get("results") or {}
        providers: list[dict[str, Any]] = []
        for region in PROVIDER_REGIONS:
            providers = (regions.get(region) or {}).get("flatrate") or []
            if providers:
                break

        return cls(
            id=data["id"],
            name=data.get("title") or data.get("name") or "",
            overview=data.get("overview"),
            poster_path=data.get("poster_path"),
            vote_average=data.get("vote_average"),
            genres=[g["name"] for g in data.get("genres") or [] if g.get("name")],
            release_date=data.get("release_date") or data.get("first_air_date") or None,
            collection=CollectionRef.model_validate(collection) if collection else None,
            providers=[WatchProvider.model_validate(p) for p in providers],
        )


class CollectionPart(TMDBModel):
    """One title of a collection."""

    id: int
    title: str
    release_date: str | None = None


class Collection(TMDBModel):
    """A TMDB collection with its member titles."""

    id: int
    name: str
    overview: str | None = None
    poster_path: str | None = None
    parts: list[CollectionPart] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Collection:
        parts = [
            CollectionPart(
                id=part["id"],
                title=part.get("title") or part.get("name") or "",
                release_date=part.get("release_date") or None,
            )
            for part in data.get("parts") or []
        ]
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            overview=data.get("overview"),
            poster_path=data.get("poster_path"),
            parts=parts,
        )
