"""Tests for domain error rendering and unexpected-exception logging."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest
from litestar.exceptions import NotAuthorizedException

from wildtrip.lib import observability
from wildtrip.lib.exceptions import (
    LockConflictError,
    LockNotHeldError,
    NotFoundError,
    PublishVerificationError,
    VersionConflictError,
    content_error_handler,
    http_exception_handler,
    internal_server_error_handler,
)


@pytest.fixture
def fake_request():
    request = MagicMock()
    request.method = "POST"
    request.url.path = "/api/species/1/publish"
    return request


class TestContentErrorHandler:
    def test_not_found(self, fake_request):
        response = content_error_handler(fake_request, NotFoundError("Species 1 not found"))

        assert response.status_code == 404
        assert response.content == {"status_code": 404, "detail": "Species 1 not found"}

    def test_lock_conflict_carries_holder(self, fake_request):
        expires = datetime(2026, 10, 18, 12, 10, tzinfo=UTC)
        exc = LockConflictError("Species 1 is locked", locked_by=7, lock_expires_at=expires)

        response = content_error_handler(fake_request, exc)

        assert response.status_code == 409
        assert response.content["lockedBy"] == 7
        assert response.content["lockExpiresAt"] == expires.isoformat()

    def test_version_conflict_carries_current_version(self, fake_request):
        response = content_error_handler(fake_request, VersionConflictError("Stale", current_version=4))

        assert response.status_code == 409
        assert response.content["currentVersion"] == 4

    def test_lock_not_held_is_invalid_state(self, fake_request):
        assert content_error_handler(fake_request, LockNotHeldError("no")).status_code == 409

    def test_verification_failure_lists_fields(self, fake_request):
        exc = PublishVerificationError("Published content did not match", ["rich_content"])

        response = content_error_handler(fake_request, exc)

        assert response.status_code == 500
        assert response.content["fields"] == ["rich_content"]


class TestHttpExceptionHandler:
    def test_renders_json(self, fake_request):
        response = http_exception_handler(fake_request, NotAuthorizedException("Authentication required"))

        assert response.status_code == 401
        assert response.content == {"status_code": 401, "detail": "Authentication required"}


class TestInternalServerErrorHandler:
    def test_calls_observability_when_available(self, fake_request):
        with patch.object(observability, "exception", return_value=True) as mock_exc:
            response = internal_server_error_handler(fake_request, RuntimeError("boom"))

        mock_exc.assert_called_once_with(
            "Unhandled exception on {method} {path}",
            method="POST",
            path="/api/species/1/publish",
        )
        assert response.status_code == 500

    def test_falls_back_to_stdlib_when_unavailable(self, fake_request):
        exc = RuntimeError("boom")
        with patch.object(observability, "exception", return_value=False), \
             patch("wildtrip.lib.exceptions.logger") as mock_logger:
            response = internal_server_error_handler(fake_request, exc)

        mock_logger.error.assert_called_once_with(
            "Unhandled exception on %s %s", "POST", "/api/species/1/publish", exc_info=exc
        )
        assert response.content == {"status_code": 500, "detail": "Internal Server Error"}

    def test_does_not_double_log(self, fake_request):
        with patch.object(observability, "exception", return_value=True), \
             patch("wildtrip.lib.exceptions.logger") as mock_logger:
            internal_server_error_handler(fake_request, RuntimeError("boom"))

        mock_logger.error.assert_not_called()
