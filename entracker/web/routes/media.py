"""Routes for adding, listing and editing tracked media."""

from typing import Any

from fastapi.param_functions import Path
from fastapi.responses import HTMLResponse
from fastapi.routing import APIRouter

from entracker.models.media import get_sheet_config
from entracker.web.routes.models import (
    CamelModel,
    DataResponse,
    MessageResponse,
    parse_media_type,
)
from entracker.web.state import get_app_state

__all__ = ["router"]

router = APIRouter()

INDEX_HTML = """
<h1>Entracker Backend is Running</h1>
<p>Welcome to the Entracker API server.</p>
<ul>
  <li>POST <code>/add-media</code> to add a new entry.</li>
  <li>GET <code>/get-media/:mediaType</code> to fetch all media of a type.</li>
  <li>PUT <code>/update-media</code> to update an existing entry.</li>
  <li>GET <code>/api/search-tmdb</code> to search TMDB.</li>
  <li>GET <code>/api/franchises/:mediaType</code> to list franchises.</li>
  <li>GET <code>/api/franchise/:mediaType/:name</code> for one franchise.</li>
  <li>GET <code>/api/details/:mediaType/:name</code> for title details.</li>
</ul>
""".strip()


class AddMediaRequest(CamelModel):
    """Body of `POST /add-media`; either `tmdb_id` or `name` identifies the title."""

    media_type: str | None = None
    tmdb_id: int | None = None
    name: str | None = None
    watched: bool | None = None
    watched_till: str | None = None


class AddMediaResponse(MessageResponse):
    data: dict[str, Any]


class UpdateMediaRequest(CamelModel):
    """Body of `PUT /update-media`; only the given fields are written."""

    row_index: int | None = None
    media_type: str | None = None
    name: str | None = None
    watched: bool | None = None
    watched_till: str | None = None
    expected_name: str | None = None


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index() -> str:
    """Landing page listing the available endpoints."""
    return INDEX_HTML


@router.post("/add-media", status_code=201, response_model=AddMediaResponse)
async def add_media(request: AddMediaRequest) -> AddMediaResponse:
    """Add a title and start filling in its franchise in the background.

    Args:
        request (AddMediaRequest): Category, TMDB id (or name) and watch state.

    Returns:
        AddMediaResponse: The stored row's column values.
    """
    request.require("media_type", "watched")
    if request.tmdb_id is None and not request.name:
        request.require("tmdb_id")

    media_type = parse_media_type(request.media_type)
    reconciler = get_app_state().get_reconciler()
    if request.tmdb_id is not None:
        record = await reconciler.add_media(
            media_type, request.tmdb_id, request.watched, request.watched_till
        )
    else:
        record = await reconciler.add_media_by_name(
            media_type, request.name, request.watched, request.watched_till
        )

    return AddMediaResponse(
        message="Media added successfully!",
        data=record.to_fields(get_sheet_config(media_type)),
    )


@router.get("/get-media/{media_type}", response_model=DataResponse)
async def get_media(media_type: str = Path(..., min_length=1)) -> DataResponse:
    """List every stored title of a category.

    Args:
        media_type (str): Category name.

    Returns:
        DataResponse: Decoded rows, each with its `row_index`.
    """
    rows = await get_app_state().get_library().list_media(parse_media_type(media_type))
    return DataResponse(data=rows)


@router.put("/update-media", response_model=MessageResponse)
async def update_media(request: UpdateMediaRequest) -> MessageResponse:
    """Edit the title, watched flag or progress of one row.

    Args:
        request (UpdateMediaRequest): Row index, category and changed fields.

    Returns:
        MessageResponse: Confirmation once every cell write succeeded.
    """
    request.require("row_index", "media_type")
    await get_app_state().get_library().update_media(
        request.row_index,
        parse_media_type(request.media_type),
        name=request.name,
        watched=request.watched,
        watched_till=request.watched_till,
        expected_name=request.expected_name,
    )
    return MessageResponse(message="Update successful!")
