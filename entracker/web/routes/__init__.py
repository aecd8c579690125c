"""Route aggregators for the web application."""

from fastapi.routing import APIRouter

from entracker.web.routes.api import router as api_router
from entracker.web.routes.media import router as media_router

__all__ = ["router"]

router = APIRouter()

router.include_router(media_router, tags=["media"])
router.include_router(api_router, prefix="/api", tags=[])
