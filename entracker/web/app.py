"""FastAPI application factory and setup."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import DEBUG

from fastapi.applications import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from entracker import __version__, config, log
from entracker.exceptions import AmbiguousMediaError, EntrackerError
from entracker.web.middlewares.request_logging import RequestLoggingMiddleware
from entracker.web.routes import router
from entracker.web.state import get_app_state

__all__ = ["create_app"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan context manager.

    Args:
        app (FastAPI): The FastAPI application instance.

    Returns:
        AsyncGenerator: The application lifespan context manager.
    """
    state = get_app_state()
    state.configure()
    log.debug("Web: Clients configured")
    try:
        yield
    finally:
        await state.shutdown()


def _error_response(
    request: Request, status_code: int, message: str, code: str, **extra
) -> JSONResponse:
    payload = {"error": message, "code": code, "path": request.url.path, **extra}
    return JSONResponse(status_code=status_code, content=payload)


def create_app() -> FastAPI:
    """Create the FastAPI application.

    Returns:
        FastAPI: The created FastAPI application.
    """
    app = FastAPI(title="Entracker", lifespan=lifespan, version=__version__)

    # Add request logging middleware if in debug mode
    if log.level <= DEBUG:
        app.add_middleware(RequestLoggingMiddleware)
        log.debug("Web: Request logging enabled (debug mode)")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.exception_handler(EntrackerError)
    async def domain_exception_handler(
        request: Request, exc: EntrackerError
    ) -> JSONResponse:
        """Handle Entracker errors with structured JSON responses.

        Args:
            request (Request): The incoming HTTP request.
            exc (EntrackerError): The exception instance.

        Returns:
            JSONResponse: JSON body with a human-readable `error` message.
        """
        cls = exc.__class__
        if cls.status_code >= 500:
            log.error(f"Web: {request.method} {request.url.path} failed: {exc}")
        extra = {}
        if isinstance(exc, AmbiguousMediaError):
            extra["candidates"] = exc.candidates
        return _error_response(
            request,
            cls.status_code,
            str(exc) or (cls.__doc__ or "").strip(),
            cls.__name__,
            **extra,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed request bodies and parameters as 400."""
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'][1:]) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        return _error_response(
            request, 400, f"Invalid request: {problems}", "RequestValidationError"
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Log unexpected failures and hide their details from the client."""
        log.error(
            f"Web: Unexpected error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return _error_response(
            request,
            500,
            "An unexpected internal server error occurred.",
            "InternalServerError",
        )

    return app
