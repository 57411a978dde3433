"""FastAPI application - document upload and grounded chat."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from askdocs.api.routes.chat import router as chat_router
from askdocs.api.routes.fileupload import router as fileupload_router
from askdocs.api.routes.health import router as health_router
from askdocs.api.routes.metrics import router as metrics_router
from askdocs.config import Settings, get_settings
from askdocs.errors import (
    AskDocsError,
    BackendError,
    ConfigurationError,
    InputValidationError,
    NotFoundError,
    PayloadTooLargeError,
)
from askdocs.middleware.upload_limit import UploadLimitMiddleware
from askdocs.utils.logging import configure_logging

VERSION = "0.1.0"

logger = logging.getLogger(__name__)

# Most specific class first; lookup walks this list in order.
ERROR_STATUS: list[tuple[type[AskDocsError], int]] = [
    (PayloadTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (InputValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (BackendError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for_error(error: AskDocsError) -> int:
    """Map an error to its HTTP status code."""
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_askdocs_error(request: Request, exc: AskDocsError) -> JSONResponse:
    """Translate typed errors into JSON responses."""
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.error(f"[{request.method} {request.url.path}] {type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"[{request.method} {request.url.path}] rejected: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "AskDocs API", "version": VERSION}


def create_app(settings: Settings) -> FastAPI:
    """Assemble the API around one Settings instance.

    The upload middleware reads its ceiling from ``settings`` here, so callers
    that override ``get_settings`` should pass the same instance.
    """
    configure_logging(settings.log_level)

    application = FastAPI(title="AskDocs API", version=VERSION)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ui_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(UploadLimitMiddleware, max_bytes=settings.max_upload_bytes)
    application.add_exception_handler(AskDocsError, handle_askdocs_error)  # type: ignore[arg-type]

    # Register routes
    application.include_router(health_router, tags=["health"])
    application.include_router(metrics_router, tags=["metrics"])
    application.include_router(fileupload_router)
    application.include_router(chat_router)
    application.get("/")(root)

    return application


app = create_app(get_settings())
