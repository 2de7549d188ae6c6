"""Advisory, time-boxed edit locks on content records.

A lock only signals that an editor is working on a record. Draft and publish
operations never consult it, so two writers that ignore the lock can still
race; keeping to one active editor is up to the clients.

Expired locks are treated as absent. Expiry is checked when a lock is
requested, there is no background sweep.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.db.content_kinds import ContentKind
from wildtrip.db.services.query_service import find_by_id, require_record
from wildtrip.lib.exceptions import ForbiddenError, LockConflictError, LockNotHeldError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_DURATION = timedelta(minutes=10)


@dataclass(frozen=True)
class LockResult:
    record_id: int
    locked_by: int
    locked_at: datetime
    lock_expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "recordId": self.record_id,
            "lockedBy": self.locked_by,
            "lockedAt": self.locked_at.isoformat(),
            "lockExpiresAt": self.lock_expires_at.isoformat(),
        }


async def _raise_for_unchanged(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    user_id: int,
    now: datetime,
) -> None:
    """Explain why a conditional lock update matched no row."""
    await db_session.rollback()
    record = await find_by_id(db_session, kind, record_id)
    if record is None:
        raise NotFoundError(f"{kind.label} {record_id} not found")
    if record.lock_is_valid(now) and record.locked_by != user_id:
        raise LockConflictError(
            f"{kind.label} {record_id} is being edited by another user",
            locked_by=record.locked_by,
            lock_expires_at=record.lock_expires_at,
        )
    raise LockNotHeldError(f"You do not hold the lock on {kind.label.lower()} {record_id}")


async def acquire_lock(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    user_id: int,
    *,
    lock_duration: timedelta = DEFAULT_LOCK_DURATION,
    now: datetime | None = None,
) -> LockResult:
    """Take (or refresh) the edit lock for a user.

    Succeeds when nobody holds a valid lock or the caller already holds it.
    The check and the write are one conditional UPDATE, so two editors
    racing for a free record cannot both win.

    Raises:
        NotFoundError: The record does not exist
        LockConflictError: Another user holds a lock that has not expired
    """
    now = now or datetime.now(UTC)
    expires_at = now + lock_duration
    model = kind.model

    result = await db_session.execute(
        update(model)
        .where(
            model.id == record_id,
            or_(
                model.locked_by.is_(None),
                model.locked_by == user_id,
                model.lock_expires_at.is_(None),
                model.lock_expires_at <= now,
            ),
        )
        .values(locked_by=user_id, locked_at=now, lock_expires_at=expires_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await _raise_for_unchanged(db_session, kind, record_id, user_id, now)

    await db_session.commit()
    logger.debug("User %s locked %s %s until %s", user_id, kind.name, record_id, expires_at)
    return LockResult(record_id=record_id, locked_by=user_id, locked_at=now, lock_expires_at=expires_at)


async def renew_lock(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    user_id: int,
    *,
    lock_duration: timedelta = DEFAULT_LOCK_DURATION,
    now: datetime | None = None,
) -> LockResult:
    """Extend a lock the caller already holds.

    A lock that expired but was not taken over by anyone can still be renewed
    by its holder.

    Raises:
        NotFoundError: The record does not exist
        LockConflictError: Another user holds a valid lock
        LockNotHeldError: The caller does not hold the lock
    """
    now = now or datetime.now(UTC)
    expires_at = now + lock_duration
    model = kind.model

    result = await db_session.execute(
        update(model)
        .where(model.id == record_id, model.locked_by == user_id)
        .values(locked_at=now, lock_expires_at=expires_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await _raise_for_unchanged(db_session, kind, record_id, user_id, now)

    await db_session.commit()
    return LockResult(record_id=record_id, locked_by=user_id, locked_at=now, lock_expires_at=expires_at)


async def release_lock(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    user_id: int,
    *,
    override: bool = False,
    now: datetime | None = None,
) -> bool:
    """Release the edit lock on a record.

    Args:
        db_session: Database session
        kind: Content kind of the record
        record_id: Record ID
        user_id: ID of the user asking for the release
        override: Caller may release locks held by others (stuck lock recovery)
        now: Timestamp override

    Returns:
        True if a lock was cleared, False if there was nothing to release

    Raises:
        NotFoundError: The record does not exist
        ForbiddenError: A valid lock is held by someone else and no override
    """
    now = now or datetime.now(UTC)
    record = await require_record(db_session, kind, record_id, for_update=True)

    if record.locked_by is None:
        return False

    is_holder = record.locked_by == user_id
    if not is_holder and not override:
        if record.lock_is_valid(now):
            raise ForbiddenError(f"Only the lock holder can release {kind.label.lower()} {record_id}")
        return False

    if not is_holder:
        logger.info(
            "User %s force-released lock of user %s on %s %s",
            user_id,
            record.locked_by,
            kind.name,
            record_id,
        )

    record.locked_by = None
    record.locked_at = None
    record.lock_expires_at = None
    await db_session.commit()
    await db_session.refresh(record)
    return True


async def get_lock(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    *,
    now: datetime | None = None,
) -> LockResult | None:
    """Current valid lock on a record, or None."""
    now = now or datetime.now(UTC)
    record = await require_record(db_session, kind, record_id)
    if not record.lock_is_valid(now):
        return None
    return LockResult(
        record_id=record.id,
        locked_by=record.locked_by,
        locked_at=record.locked_at,
        lock_expires_at=record.lock_expires_at,
    )
