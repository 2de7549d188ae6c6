"""User administration API."""

from __future__ import annotations

from typing import Any, Literal

from litestar import Controller, Request, get, patch
from litestar.params import Parameter
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.auth.guards import Permission, auth_guard
from wildtrip.auth.roles import MANAGE_USERS, has_permission
from wildtrip.controllers.helpers import wire_page
from wildtrip.db.services import user_service
from wildtrip.db.services.serializers import to_wire, user_dict
from wildtrip.lib.exceptions import ForbiddenError, ValidationError

# camelCase request keys accepted by PATCH
_USER_BODY_KEYS = {
    "username": "username",
    "fullName": "full_name",
    "avatarUrl": "avatar_url",
    "bio": "bio",
    "isActive": "is_active",
    "role": "role",
}


class UserController(Controller):
    """List, inspect and update user accounts."""

    path = "/api/users"
    guards = [auth_guard]
    tags = ["Users"]

    @get("/", guards=[Permission(MANAGE_USERS)])
    async def list_users(
        self,
        db_session: AsyncSession,
        page: int = 1,
        page_size: int = Parameter(query="pageSize", default=20, ge=1, le=100),
        search: str | None = None,
        role: str | None = None,
        sort_by: str | None = Parameter(query="sortBy", default=None),
        sort_order: Literal["asc", "desc"] = Parameter(query="sortOrder", default="desc"),
    ) -> dict[str, Any]:
        result = await user_service.list_users(
            db_session,
            page=page,
            page_size=page_size,
            search=search,
            role=role,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return wire_page(result, user_dict)

    @get("/stats", guards=[Permission(MANAGE_USERS)])
    async def stats(self, db_session: AsyncSession) -> dict[str, Any]:
        return await user_service.get_user_stats(db_session)

    @get("/me")
    async def me(self, request: Request) -> dict[str, Any]:
        return to_wire(user_dict(request.state.user))

    @patch("/{user_id:int}")
    async def update_user(
        self, request: Request, db_session: AsyncSession, user_id: int, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Update a profile; editing other accounts needs ``manage-users``."""
        actor = request.state.user
        if user_id != actor.id and not has_permission(actor.role, MANAGE_USERS):
            raise ForbiddenError("You can only edit your own profile")

        unknown = sorted(set(data.keys()) - _USER_BODY_KEYS.keys())
        if unknown:
            raise ValidationError(f"Unknown user fields: {', '.join(unknown)}")
        changes = {_USER_BODY_KEYS[key]: value for key, value in data.items()}

        user = await user_service.update_user(
            db_session,
            user_id,
            changes,
            actor=actor,
            identity=request.app.state.identity,
        )
        return to_wire(user_dict(user))
