"""Route guards for editor endpoints.

The session holds only the user ID; the user row is loaded on each request
so role changes apply immediately.
"""

from __future__ import annotations

from litestar.connection import ASGIConnection
from litestar.exceptions import NotAuthorizedException, PermissionDeniedException
from litestar.handlers.base import BaseRouteHandler
from sqlalchemy import select

from wildtrip.auth.roles import has_permission
from wildtrip.db.models import User

SESSION_USER_ID = "user_id"


async def get_current_user(connection: ASGIConnection) -> User | None:
    """Resolve the session user, caching it on the connection state."""
    cached = connection.state.get("user")
    if cached is not None:
        return cached

    user_id = connection.session.get(SESSION_USER_ID)
    if not user_id:
        return None

    db_config = connection.app.state.db_config
    async with db_config.get_session() as db_session:
        result = await db_session.execute(select(User).where(User.id == int(user_id)))
        user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        return None

    connection.state.user = user
    return user


async def auth_guard(connection: ASGIConnection, _: BaseRouteHandler) -> None:
    if await get_current_user(connection) is None:
        raise NotAuthorizedException("Authentication required")


class Permission:
    """Guard requiring a permission (``administrator`` passes every check)."""

    def __init__(self, permission: str):
        self.permission = permission

    async def __call__(self, connection: ASGIConnection, _: BaseRouteHandler) -> None:
        user = await get_current_user(connection)
        if user is None:
            raise NotAuthorizedException("Authentication required")
        if not has_permission(user.role, self.permission):
            raise PermissionDeniedException(f"Missing permission '{self.permission}'")
