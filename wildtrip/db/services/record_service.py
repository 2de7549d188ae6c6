"""Create, update, archive and delete content records directly.

These write the published columns without going through a draft. Editors
normally stage changes with ``draft_service``; direct updates are for record
creation, slug changes and administrative fixes.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, UTC
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.db.content_kinds import ContentKind
from wildtrip.db.models import ContentStatus
from wildtrip.db.services.draft_service import check_version
from wildtrip.db.services.query_service import require_record
from wildtrip.lib.exceptions import ValidationError, VersionConflictError

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def validate_slug(slug: str) -> str:
    slug = slug.strip()
    if not SLUG_PATTERN.match(slug):
        raise ValidationError(f"Invalid slug '{slug}'")
    return slug


def _validate_fields(kind: ContentKind, data: Mapping[str, Any], creating: bool) -> None:
    unknown = sorted(set(data.keys()) - kind.editable_fields)
    if unknown:
        raise ValidationError(f"Unknown {kind.label.lower()} fields: {', '.join(unknown)}")

    if creating:
        missing = sorted(name for name in kind.required_fields if data.get(name) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    else:
        cleared = sorted(name for name in data.keys() if name in kind.required_fields and data[name] is None)
        if cleared:
            raise ValidationError(f"Required fields cannot be cleared: {', '.join(cleared)}")


async def _commit_or_slug_conflict(db_session: AsyncSession, slug: str | None) -> None:
    try:
        await db_session.commit()
    except IntegrityError:
        await db_session.rollback()
        raise ValidationError(f"Slug '{slug}' is already in use") from None


async def create_record(
    db_session: AsyncSession,
    kind: ContentKind,
    slug: str,
    data: Mapping[str, Any],
    status: str = ContentStatus.DRAFT,
    now: datetime | None = None,
) -> Any:
    """Create a new record of the given kind.

    Args:
        db_session: Database session
        kind: Content kind
        slug: Unique URL slug
        data: Initial published field values
        status: ``draft`` (default) or ``published``
        now: Timestamp override

    Returns:
        The created record
    """
    slug = validate_slug(slug)
    _validate_fields(kind, data, creating=True)
    if status not in (ContentStatus.DRAFT, ContentStatus.PUBLISHED):
        raise ValidationError(f"Records cannot be created with status '{status}'")

    now = now or datetime.now(UTC)
    record = kind.model(
        slug=slug,
        status=status,
        published_at=now if status == ContentStatus.PUBLISHED else None,
        has_draft=False,
        version=1,
        **data,
    )

    db_session.add(record)
    await _commit_or_slug_conflict(db_session, slug)
    await db_session.refresh(record)

    logger.info("Created %s %s (%s)", kind.name, record.id, slug)
    return record


async def update_record(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    data: Mapping[str, Any],
    slug: str | None = None,
    expected_version: int | None = None,
    now: datetime | None = None,
) -> Any:
    """Write published fields directly, bypassing the draft overlay."""
    _validate_fields(kind, data, creating=False)

    record = await require_record(db_session, kind, record_id, for_update=True)
    try:
        check_version(record, expected_version)
    except VersionConflictError:
        await db_session.rollback()
        raise

    if slug is not None:
        record.slug = validate_slug(slug)
    for key in data.keys():
        setattr(record, key, data[key])
    record.updated_at = now or datetime.now(UTC)
    record.version += 1

    await _commit_or_slug_conflict(db_session, record.slug)
    await db_session.refresh(record)
    return record


async def archive_record(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    now: datetime | None = None,
) -> Any:
    """Hide a record from public listings without deleting it."""
    record = await require_record(db_session, kind, record_id, for_update=True)
    if record.status == ContentStatus.ARCHIVED:
        return record

    record.status = ContentStatus.ARCHIVED
    record.updated_at = now or datetime.now(UTC)
    record.version += 1

    await db_session.commit()
    await db_session.refresh(record)
    logger.info("Archived %s %s", kind.name, record_id)
    return record


async def delete_record(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
) -> None:
    record = await require_record(db_session, kind, record_id)
    await db_session.delete(record)
    await db_session.commit()
    logger.info("Deleted %s %s", kind.name, record_id)
