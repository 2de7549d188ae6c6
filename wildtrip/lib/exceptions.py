"""Domain errors and their HTTP rendering."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from wildtrip.lib import observability

logger = logging.getLogger(__name__)


class ContentError(Exception):
    """Base class for errors raised by the content services."""

    status_code: int = HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def extra(self) -> dict[str, Any]:
        """Additional fields rendered in the JSON error body."""
        return {}


class NotFoundError(ContentError):
    status_code = HTTP_404_NOT_FOUND


class ValidationError(ContentError):
    status_code = HTTP_400_BAD_REQUEST


class InvalidStateError(ContentError):
    """The record is not in a state that allows the transition."""

    status_code = HTTP_409_CONFLICT


class LockNotHeldError(InvalidStateError):
    pass


class LockConflictError(ContentError):
    """Another editor holds a valid lock on the record."""

    status_code = HTTP_409_CONFLICT

    def __init__(
        self,
        detail: str,
        locked_by: int | None = None,
        lock_expires_at: datetime | None = None,
    ) -> None:
        super().__init__(detail)
        self.locked_by = locked_by
        self.lock_expires_at = lock_expires_at

    def extra(self) -> dict[str, Any]:
        return {
            "lockedBy": self.locked_by,
            "lockExpiresAt": self.lock_expires_at.isoformat() if self.lock_expires_at else None,
        }


class VersionConflictError(ContentError):
    status_code = HTTP_409_CONFLICT

    def __init__(self, detail: str, current_version: int) -> None:
        super().__init__(detail)
        self.current_version = current_version

    def extra(self) -> dict[str, Any]:
        return {"currentVersion": self.current_version}


class ForbiddenError(ContentError):
    status_code = HTTP_403_FORBIDDEN


class PublishVerificationError(ContentError):
    """Structured content did not survive the round trip through the store."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, fields: list[str]) -> None:
        super().__init__(detail)
        self.fields = fields

    def extra(self) -> dict[str, Any]:
        return {"fields": self.fields}


class UpstreamSyncError(ContentError):
    """The identity provider rejected or failed a sync request."""

    status_code = HTTP_502_BAD_GATEWAY


def content_error_handler(request: Request, exc: ContentError) -> Response:
    """Render a domain error as a JSON body with the matching status code."""
    return Response(
        content={"status_code": exc.status_code, "detail": exc.detail, **exc.extra()},
        status_code=exc.status_code,
        media_type="application/json",
    )


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return Response(
        content={"status_code": exc.status_code, "detail": detail},
        status_code=exc.status_code,
        media_type="application/json",
    )


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Log unexpected exceptions and answer with a generic 500."""
    if not observability.exception(
        "Unhandled exception on {method} {path}",
        method=request.method,
        path=request.url.path,
    ):
        logger.error(
            "Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc
        )
    return Response(
        content={"status_code": HTTP_500_INTERNAL_SERVER_ERROR, "detail": "Internal Server Error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/json",
    )


EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    ContentError: content_error_handler,
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}
