"""API route for the details panel of a stored title."""

from fastapi.param_functions import Path
from fastapi.routing import APIRouter

from entracker.web.routes.models import DataResponse, parse_media_type
from entracker.web.state import get_app_state

__all__ = ["router"]

router = APIRouter()


@router.get("/{media_type}/{name}", response_model=DataResponse)
async def get_details(
    media_type: str = Path(..., min_length=1),
    name: str = Path(..., min_length=1),
) -> DataResponse:
    """Look up overview, poster, rating, genres and streaming providers."""
    library = get_app_state().get_library()
    details = await library.media_details(parse_media_type(media_type), name)
    return DataResponse(data=details)
