"""User service for account listing, role changes and identity provider sync."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, UTC
from typing import Any, Literal, Mapping

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.auth.identity import IdentityProviderClient
from wildtrip.auth.roles import DEFAULT_ROLE, MANAGE_USERS, has_permission, is_valid_role
from wildtrip.db.models import User
from wildtrip.lib.exceptions import ForbiddenError, NotFoundError, UpstreamSyncError, ValidationError
from wildtrip.lib.pagination import Paginated, Pagination

logger = logging.getLogger(__name__)

EDITABLE_USER_FIELDS = frozenset({"username", "full_name", "avatar_url", "bio", "is_active", "role"})
IDENTITY_FIELDS = ("email", "username", "full_name", "avatar_url")

USER_SORT_FIELDS = {
    "email": "email",
    "fullName": "full_name",
    "role": "role",
    "createdAt": "created_at",
}


async def list_users(
    db_session: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    search: str | None = None,
    role: str | None = None,
    sort_by: str | None = None,
    sort_order: Literal["asc", "desc"] = "desc",
) -> Paginated:
    """List users with search, role filter and pagination.

    Args:
        db_session: Database session
        page: 1-based page number
        page_size: Users per page
        search: Case-insensitive match on email, full name or username
        role: Only users with this role
        sort_by: One of ``USER_SORT_FIELDS`` (defaults to creation date)
        sort_order: ``asc`` or ``desc``

    Returns:
        Paginated envelope of User objects
    """
    if page < 1 or page_size < 1:
        raise ValidationError("'page' and 'pageSize' must be positive integers")

    conditions = []
    if search and search.strip():
        term = search.strip()
        conditions.append(
            or_(
                User.email.icontains(term, autoescape=True),
                User.full_name.icontains(term, autoescape=True),
                User.username.icontains(term, autoescape=True),
            )
        )
    if role:
        conditions.append(User.role == role)

    column = getattr(User, USER_SORT_FIELDS.get(sort_by or "", "created_at"))
    primary = column.asc() if sort_order == "asc" else column.desc()

    query = (
        select(User, func.count().over().label("total_count"))
        .where(*conditions)
        .order_by(primary, User.id.asc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    )
    rows = (await db_session.execute(query)).all()

    if rows:
        total = rows[0].total_count
    elif page > 1:
        count_result = await db_session.execute(select(func.count()).select_from(User).where(*conditions))
        total = count_result.scalar() or 0
    else:
        total = 0

    return Paginated(data=[row[0] for row in rows], pagination=Pagination.build(page, page_size, total))


async def get_user(db_session: AsyncSession, user_id: int) -> User:
    result = await db_session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def get_user_by_external_id(db_session: AsyncSession, external_id: str) -> User | None:
    result = await db_session.execute(select(User).where(User.external_id == external_id))
    return result.scalar_one_or_none()


async def sync_identity(identity: IdentityProviderClient | None, user: User) -> bool:
    """Push a user's role and ID to the identity provider.

    Failures are logged and reported through the return value only; the local
    database state is authoritative and is never rolled back.
    """
    if identity is None:
        return False
    try:
        await identity.sync_user(user.external_id, user.role, user.id)
    except UpstreamSyncError:
        logger.warning("Failed to sync user %s to the identity provider", user.external_id, exc_info=True)
        return False
    return True


async def update_user(
    db_session: AsyncSession,
    user_id: int,
    changes: Mapping[str, Any],
    actor: User,
    identity: IdentityProviderClient | None = None,
) -> User:
    """Update a user's profile fields or role.

    Role changes are only allowed for administrators and never on the actor's
    own account. After a role change is committed it is pushed to the
    identity provider.

    Raises:
        NotFoundError: No such user
        ForbiddenError: Role change on self, or by a non-administrator
        ValidationError: Unknown field or role
    """
    unknown = sorted(set(changes.keys()) - EDITABLE_USER_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown user fields: {', '.join(unknown)}")

    user = await get_user(db_session, user_id)

    role = changes.get("role")
    if role:
        if user.id == actor.id:
            raise ForbiddenError("You cannot change your own role")
        if not has_permission(actor.role, MANAGE_USERS):
            raise ForbiddenError("Only admins can change user roles")
        if not is_valid_role(role):
            raise ValidationError(f"Unknown role '{role}'")

    for key in changes.keys():
        if key == "role" and not role:
            continue
        setattr(user, key, changes[key])

    await db_session.commit()
    await db_session.refresh(user)

    if role:
        logger.info("User %s changed role of user %s to %s", actor.id, user.id, role)
        await sync_identity(identity, user)

    return user


async def create_user_from_identity(
    db_session: AsyncSession,
    external_id: str,
    email: str,
    full_name: str | None = None,
    username: str | None = None,
    avatar_url: str | None = None,
    role: str | None = None,
    identity: IdentityProviderClient | None = None,
) -> User:
    """Mirror a newly registered identity provider account locally."""
    if role and not is_valid_role(role):
        logger.warning("Ignoring unknown role %r for new user %s", role, external_id)
        role = None

    user = User(
        external_id=external_id,
        email=email,
        full_name=full_name,
        username=username,
        avatar_url=avatar_url,
        role=role or DEFAULT_ROLE,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)

    await sync_identity(identity, user)
    return user


async def update_user_from_identity(
    db_session: AsyncSession,
    external_id: str,
    **fields: Any,
) -> User | None:
    """Copy profile changes made at the identity provider.

    Only ``email``, ``username``, ``full_name`` and ``avatar_url`` are taken
    over; the role stays under local control.
    """
    user = await get_user_by_external_id(db_session, external_id)
    if user is None:
        return None

    for key in IDENTITY_FIELDS:
        if key in fields and not (key == "email" and not fields[key]):
            setattr(user, key, fields[key])

    await db_session.commit()
    await db_session.refresh(user)
    return user


async def delete_user_by_external_id(db_session: AsyncSession, external_id: str) -> bool:
    user = await get_user_by_external_id(db_session, external_id)
    if user is None:
        return False

    await db_session.delete(user)
    await db_session.commit()
    return True


async def get_user_stats(db_session: AsyncSession, now: datetime | None = None) -> dict[str, Any]:
    """User totals, per-role counts and recent sign-ups.

    "Active" counts are based on account creation time.
    """
    now = now or datetime.now(UTC)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    last_week = now - timedelta(days=7)
    last_month = now - timedelta(days=30)

    def created_since(moment: datetime):
        return func.coalesce(func.sum(case((User.created_at >= moment, 1), else_=0)), 0)

    totals = (
        await db_session.execute(
            select(
                func.count(User.id),
                created_since(last_month),
                created_since(last_week),
                created_since(start_of_day),
            )
        )
    ).one()

    by_role = await db_session.execute(select(User.role, func.count(User.id)).group_by(User.role))

    return {
        "total": totals[0],
        "byRole": {role: count for role, count in by_role.all()},
        "activeLastMonth": totals[1],
        "activeLastWeek": totals[2],
        "activeToday": totals[3],
    }
