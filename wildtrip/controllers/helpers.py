"""Shared helpers for the JSON controllers."""

from __future__ import annotations

from typing import Any, Callable

from litestar import Request

from wildtrip.config import Settings
from wildtrip.db.services.serializers import to_wire
from wildtrip.lib.exceptions import ValidationError
from wildtrip.lib.pagination import Paginated


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def query_dict(request: Request) -> dict[str, str]:
    """Flatten query parameters; repeated keys keep their last value."""
    return {key: value for key, value in request.query_params.items()}


def wire_page(page: Paginated, project: Callable[[Any], dict[str, Any]]) -> dict[str, Any]:
    """Project every item and camelCase the result for the response body."""
    return {
        "data": [to_wire(project(item)) for item in page.data],
        "pagination": page.pagination.to_dict(),
    }


def pop_expected_version(data: dict[str, Any], settings: Settings) -> int | None:
    """Take ``expectedVersion`` out of a request body."""
    raw = data.pop("expectedVersion", None)
    if raw is None:
        if settings.drafts.require_version:
            raise ValidationError("'expectedVersion' is required")
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValidationError("'expectedVersion' must be an integer")
    return raw
