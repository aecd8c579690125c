"""API routes."""

from fastapi.routing import APIRouter

from entracker.web.routes.api.details import router as details_router
from entracker.web.routes.api.franchises import router as franchises_router
from entracker.web.routes.api.search import router as search_router

__all__ = ["router"]

router = APIRouter()

router.include_router(search_router, tags=["search"])
router.include_router(franchises_router, tags=["franchises"])
router.include_router(details_router, prefix="/details", tags=["details"])
