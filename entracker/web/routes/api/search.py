"""API route for TMDB title search, used for disambiguation before adding."""

from fastapi.param_functions import Query
from fastapi.routing import APIRouter

from entracker.exceptions import RequestFieldsError
from entracker.web.routes.models import DataResponse, parse_media_type
from entracker.web.state import get_app_state

__all__ = ["router"]

router = APIRouter()


@router.get("/search-tmdb", response_model=DataResponse)
async def search_tmdb(
    media_type: str | None = Query(None, alias="mediaType"),
    name: str | None = Query(None),
) -> DataResponse:
    """Search TMDB for titles of a category.

    Args:
        media_type (str | None): Category name.
        name (str | None): Title query.

    Returns:
        DataResponse: `[{id, name, release_date}]` candidates.
    """
    if not media_type or not name or not name.strip():
        raise RequestFieldsError("mediaType and name are required.")

    tmdb = get_app_state().get_tmdb()
    results = await tmdb.search(parse_media_type(media_type), name.strip())
    return DataResponse(data=[result.model_dump() for result in results])
