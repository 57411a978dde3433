"""Upload size middleware.

Rejects uploads whose declared Content-Length already exceeds the ceiling,
before the multipart body is read. Requests without the header fall through
to the per-file check in the upload route.
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/fileupload"

# Room for multipart boundaries and part headers around the file itself
MULTIPART_ALLOWANCE_BYTES = 64 * 1024


def exceeds_limit(content_length: str | None, max_bytes: int) -> bool:
    """Check a raw Content-Length header against the file ceiling.

    The header covers the whole multipart body, so it is compared against
    ``max_bytes`` plus MULTIPART_ALLOWANCE_BYTES. A file of exactly
    ``max_bytes`` always passes and is judged by the route.
    """
    if content_length is None:
        return False
    try:
        return int(content_length) > max_bytes + MULTIPART_ALLOWANCE_BYTES
    except ValueError:
        return False


class UploadLimitMiddleware(BaseHTTPMiddleware):
    """Enforce max_upload_bytes on POST /api/fileupload before the body is read."""

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        """Initialize upload limit middleware.

        Args:
            app: Wrapped ASGI application
            max_bytes: Upload ceiling, the same value the upload route enforces
        """
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "POST" and request.url.path.rstrip("/") == UPLOAD_PATH:
            content_length = request.headers.get("content-length")
            if exceeds_limit(content_length, self.max_bytes):
                logger.warning(
                    f"[POST {UPLOAD_PATH}] rejected before read, content-length "
                    f"{content_length} > {self.max_bytes} + multipart allowance"
                )
                return JSONResponse(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    content={"detail": f"Request exceeds the upload limit of {self.max_bytes} bytes."},
                )

        return await call_next(request)
