"""Published-only read API consumed by the public site.

Failures here never propagate: a broken query degrades to an empty page,
``None``, ``[]`` or ``0`` so the public site keeps rendering.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.db.content_kinds import ContentKind
from wildtrip.db.models import ContentStatus
from wildtrip.db.services import query_service
from wildtrip.db.services.query_service import DEFAULT_MAX_PAGE_SIZE, ListFilters
from wildtrip.db.services.serializers import public_dict
from wildtrip.lib.pagination import Paginated

logger = logging.getLogger(__name__)


def _public_filters(
    kind: ContentKind,
    params: Mapping[str, Any],
    max_page_size: int,
) -> ListFilters:
    filters = ListFilters.from_params(kind, params, max_page_size=max_page_size)
    filters.status = ContentStatus.PUBLISHED
    return filters


async def find_published(
    db_session: AsyncSession,
    kind: ContentKind,
    params: Mapping[str, Any] | None = None,
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
) -> Paginated:
    """List published records as public projections.

    Invalid paging parameters are the caller's error and still raise
    ``ValidationError``; storage failures degrade to an empty page.
    """
    filters = _public_filters(kind, params or {}, max_page_size)
    page_size = filters.page_size(kind)
    try:
        result = await query_service.find_all(db_session, kind, filters)
    except SQLAlchemyError:
        logger.warning("Public listing of %s failed", kind.name, exc_info=True)
        return Paginated.empty(filters.page, page_size)

    result.data = [public_dict(kind, record) for record in result.data]
    return result


async def find_by_slug(
    db_session: AsyncSession,
    kind: ContentKind,
    slug: str,
) -> dict[str, Any] | None:
    """Public projection of a published record, or None."""
    try:
        record = await query_service.find_by_slug(db_session, kind, slug, published_only=True)
    except SQLAlchemyError:
        logger.warning("Public lookup of %s slug %r failed", kind.name, slug, exc_info=True)
        return None
    return public_dict(kind, record) if record is not None else None


async def find_by_id(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
) -> dict[str, Any] | None:
    """Public projection of a published record, or None."""
    try:
        record = await query_service.find_by_id(db_session, kind, record_id, published_only=True)
    except SQLAlchemyError:
        logger.warning("Public lookup of %s %s failed", kind.name, record_id, exc_info=True)
        return None
    return public_dict(kind, record) if record is not None else None


async def get_last_published(
    db_session: AsyncSession,
    kind: ContentKind,
    limit: int = 3,
) -> list[dict[str, Any]]:
    """Most recently published records."""
    page = await find_published(
        db_session,
        kind,
        {"page": 1, "limit": limit, "sortBy": "publishedAt", "sortOrder": "desc"},
    )
    return page.data


async def get_total_published(db_session: AsyncSession, kind: ContentKind) -> int:
    page = await find_published(db_session, kind, {"page": 1, "limit": 1})
    return page.pagination.total


