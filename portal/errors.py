"""Portal exception taxonomy and the handlers that turn it into responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class PortalError(Exception):
    """Base error carrying an HTTP status and a client-safe message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(PortalError):
    status_code = 404
    default_message = "File not found"


class ForbiddenError(PortalError):
    status_code = 403
    default_message = "Forbidden"


class UploadRejectedError(PortalError):
    """Multipart upload violated the part-count or size limits."""

    status_code = 400
    default_message = "Upload rejected"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ContentIOError(PortalError):
    """Disk read/copy/unlink failure. Surfaced as a generic 500."""

    default_message = "Internal server error"


async def _portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "portal_error",
            path=request.url.path,
            error=type(exc).__name__,
            cause=str(exc.__cause__) if exc.__cause__ else None,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    """Map the taxonomy to responses and catch everything else as a 500."""
    app.add_exception_handler(PortalError, _portal_error_handler)

    @app.middleware("http")
    async def catch_unhandled(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.error(
                "unhandled_error",
                path=request.url.path,
                method=request.method,
                exc_info=True,
            )
            return JSONResponse(
                status_code=500, content={"detail": "Internal server error"}
            )
