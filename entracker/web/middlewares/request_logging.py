"""Debug-level logging of HTTP requests."""

import io
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from entracker import log

__all__ = ["RequestLoggingMiddleware"]

MAX_BODY_CHARS = 1000
TEXT_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, query, a body preview and the response status."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Log the request around the downstream handler.

        Args:
            request (Request): The incoming HTTP request.
            call_next (RequestResponseEndpoint): The downstream handler.

        Returns:
            Response: The downstream response, unchanged.
        """
        target = request.url.path
        if request.url.query:
            target += f"?{request.url.query}"
        line = f"{request.method} {target}"

        body_preview = await self._body_preview(request)
        if body_preview:
            line += f" - Body: {body_preview}"

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = (time.perf_counter() - start) * 1000
            log.debug(f"Web: {line} - Failed after {elapsed:.1f}ms: {e}")
            raise

        elapsed = (time.perf_counter() - start) * 1000
        log.debug(f"Web: {line} - Response: {response.status_code} ({elapsed:.1f}ms)")
        return response

    async def _body_preview(self, request: Request) -> str | None:
        try:
            body = await request.body()
        except Exception as e:
            return f"<error reading body: {e}>"
        if not body:
            return None

        request.scope["body"] = io.BytesIO(body)
        content_type = request.headers.get("content-type", "").split(";")[0].strip()
        is_text = content_type.startswith("text/") or content_type in TEXT_CONTENT_TYPES
        if not is_text:
            return f"<{content_type or 'unknown'}, {len(body)} bytes>"

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            return f"<binary data, {len(body)} bytes>"
        if len(text) > MAX_BODY_CHARS:
            return text[:MAX_BODY_CHARS] + "..."
        return text
