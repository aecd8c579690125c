"""API routes for franchises of movie-like categories."""

from typing import Any

from fastapi.param_functions import Path
from fastapi.routing import APIRouter
from pydantic import BaseModel

from entracker.web.routes.models import DataResponse, parse_media_type
from entracker.web.state import get_app_state

__all__ = ["router"]

router = APIRouter()


class FranchiseResponse(BaseModel):
    """Stored titles of a franchise with TMDB collection details."""

    details: dict[str, Any]
    movies: list[dict[str, Any]]


@router.get("/franchises/{media_type}", response_model=DataResponse)
async def list_franchises(media_type: str = Path(..., min_length=1)) -> DataResponse:
    """List the distinct franchises stored for a movie-like category."""
    library = get_app_state().get_library()
    franchises = await library.list_franchises(parse_media_type(media_type))
    return DataResponse(data=franchises)


@router.get("/franchise/{media_type}/{name}", response_model=FranchiseResponse)
async def get_franchise(
    media_type: str = Path(..., min_length=1),
    name: str = Path(..., min_length=1),
) -> FranchiseResponse:
    """Get the stored titles and collection details of one franchise.

    Args:
        media_type (str): Movie-like category name.
        name (str): Franchise name, matched case-insensitively.

    Returns:
        FranchiseResponse: Collection details and the matching rows.
    """
    library = get_app_state().get_library()
    result = await library.franchise_details(parse_media_type(media_type), name)
    return FranchiseResponse(**result)
