"""Draft overlay and publish transitions for content records.

States per record:

* clean published  - ``status=published``, no draft
* clean draft      - ``status=draft``, never published, no draft overlay
* dirty            - any status with a pending ``draft_data`` overlay

None of these operations look at the edit lock. The lock is advisory and its
enforcement is the caller's responsibility.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, UTC
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.db.content_kinds import ContentKind
from wildtrip.db.models import ContentStatus
from wildtrip.db.services.query_service import require_record
from wildtrip.lib import observability
from wildtrip.lib.exceptions import (
    InvalidStateError,
    PublishVerificationError,
    ValidationError,
    VersionConflictError,
)

logger = logging.getLogger(__name__)


def merge_draft(existing: Mapping[str, Any] | None, patch: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow key-level merge of a patch into an existing draft.

    Every key present in ``patch`` wins, including keys whose value is None.
    Keys absent from ``patch`` keep their previous draft value.
    """
    merged = dict(existing) if existing else {}
    for key in patch.keys():
        merged[key] = copy.deepcopy(patch[key])
    return merged


def validate_patch(kind: ContentKind, patch: Mapping[str, Any]) -> None:
    if not patch:
        raise ValidationError("Draft patch is empty")

    unknown = sorted(set(patch.keys()) - kind.editable_fields)
    if unknown:
        raise ValidationError(f"Unknown {kind.label.lower()} fields: {', '.join(unknown)}")

    cleared = sorted(key for key in patch.keys() if key in kind.required_fields and patch[key] is None)
    if cleared:
        raise ValidationError(f"Required fields cannot be cleared: {', '.join(cleared)}")


def check_version(record: Any, expected_version: int | None) -> None:
    if expected_version is not None and record.version != expected_version:
        raise VersionConflictError(
            f"Record was modified (version {record.version}, expected {expected_version})",
            current_version=record.version,
        )


def _clear_draft(record: Any) -> None:
    record.draft_data = None
    record.has_draft = False
    record.draft_created_at = None


async def create_draft(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    patch: Mapping[str, Any],
    *,
    expected_version: int | None = None,
    now: datetime | None = None,
) -> Any:
    """Merge a patch into the record's draft overlay.

    The row is read with ``FOR UPDATE`` so concurrent patches to the same
    record are applied one after the other instead of overwriting each other.

    Args:
        db_session: Database session
        kind: Content kind of the record
        record_id: Record ID
        patch: Field values to stage; keys must be editable fields
        expected_version: Reject the write if the record version differs
        now: Timestamp override

    Returns:
        The updated record

    Raises:
        NotFoundError: The record does not exist
        ValidationError: Empty patch, unknown field, or a required field cleared
        VersionConflictError: ``expected_version`` does not match
    """
    now = now or datetime.now(UTC)

    record = await require_record(db_session, kind, record_id, for_update=True)
    try:
        validate_patch(kind, patch)
        check_version(record, expected_version)
    except (ValidationError, VersionConflictError):
        await db_session.rollback()
        raise

    record.draft_data = merge_draft(record.draft_data, patch)
    record.has_draft = True
    if record.draft_created_at is None:
        record.draft_created_at = now
    record.updated_at = now
    record.version += 1

    await db_session.commit()
    await db_session.refresh(record)

    logger.debug("Draft updated for %s %s: %s", kind.name, record_id, sorted(patch.keys()))
    return record


async def discard_draft(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    *,
    now: datetime | None = None,
) -> Any:
    """Drop the draft overlay, leaving published fields untouched.

    Discarding when there is no draft is a no-op.
    """
    record = await require_record(db_session, kind, record_id, for_update=True)

    if record.draft_data is None and not record.has_draft and record.draft_created_at is None:
        return record

    _clear_draft(record)
    record.updated_at = now or datetime.now(UTC)

    await db_session.commit()
    await db_session.refresh(record)

    logger.debug("Draft discarded for %s %s", kind.name, record_id)
    return record


async def publish(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    *,
    expected_version: int | None = None,
    now: datetime | None = None,
) -> Any:
    """Promote the draft overlay (or a never-published record) to published.

    With a draft present, every draft key is written to the published columns,
    the draft state is cleared and the status becomes ``published`` in one
    transaction. Structured fields are read back from the database before the
    commit; if any of them did not round-trip the transaction is rolled back.

    Raises:
        NotFoundError: The record does not exist
        InvalidStateError: Already published and no draft pending
        VersionConflictError: ``expected_version`` does not match
        PublishVerificationError: Structured content was not stored intact
    """
    now = now or datetime.now(UTC)

    with observability.span("content.publish", kind=kind.name, record_id=record_id) as publish_span:
        record = await require_record(db_session, kind, record_id, for_update=True)
        try:
            check_version(record, expected_version)

            draft = record.draft_data
            observability.set_attribute(
                publish_span, "draft_fields", sorted(draft.keys()) if draft is not None else []
            )
            if draft is not None:
                _apply_draft(kind, record, draft)
                _clear_draft(record)
                _mark_published(record, now)
                await db_session.flush()
                await _verify_structured_fields(db_session, kind, record_id, draft)
            elif record.status == ContentStatus.DRAFT:
                _mark_published(record, now)
            else:
                raise InvalidStateError(f"{kind.label} {record_id} has nothing to publish")
        except Exception:
            await db_session.rollback()
            raise

        await db_session.commit()
        await db_session.refresh(record)
        observability.set_attribute(publish_span, "version", record.version)

    logger.info("Published %s %s (version %s)", kind.name, record_id, record.version)
    return record


def _apply_draft(kind: ContentKind, record: Any, draft: Mapping[str, Any]) -> None:
    for key in draft.keys():
        if key not in kind.editable_fields:
            logger.warning("Ignoring non-editable draft key %r on %s %s", key, kind.name, record.id)
            continue
        setattr(record, key, copy.deepcopy(draft[key]))


def _mark_published(record: Any, now: datetime) -> None:
    record.status = ContentStatus.PUBLISHED
    record.published_at = now
    record.updated_at = now
    record.version += 1


async def _verify_structured_fields(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    draft: Mapping[str, Any],
) -> None:
    fields = sorted(key for key in draft.keys() if key in kind.structured_fields)
    if not fields:
        return

    result = await db_session.execute(
        select(*[kind.column(name) for name in fields]).where(kind.column("id") == record_id)
    )
    stored = result.one()

    mismatched = [name for name, value in zip(fields, stored) if value != draft[name]]
    if mismatched:
        logger.error(
            "Structured content lost while publishing %s %s: %s", kind.name, record_id, mismatched
        )
        raise PublishVerificationError(
            f"{kind.label} {record_id} content did not persist intact", fields=mismatched
        )
