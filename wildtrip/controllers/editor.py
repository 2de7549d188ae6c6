"""Controller factory for the authenticated editor API.

Every route requires a session user holding the kind's edit permission.
Request and response bodies use camelCase keys.
"""

from __future__ import annotations

from typing import Any

from litestar import Controller, Request, delete, get, patch, post, put
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.auth.guards import Permission, auth_guard
from wildtrip.auth.roles import MANAGE_LOCKS, has_permission
from wildtrip.controllers.helpers import get_app_settings, pop_expected_version, query_dict, wire_page
from wildtrip.db.content_kinds import ContentKind
from wildtrip.db.services import draft_service, lock_service, query_service, record_service
from wildtrip.db.services.query_service import ListFilters
from wildtrip.db.services.serializers import editor_dict, patch_from_wire, preview_dict, to_wire
from wildtrip.lib.exceptions import ValidationError


def _require_body(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return dict(data)


def create_editor_controller(kind: ContentKind) -> type[Controller]:
    """Create the editor Controller subclass for one content kind."""

    def _editor(record: Any) -> dict[str, Any]:
        return to_wire(editor_dict(kind, record))

    class _EditorContentController(Controller):
        path = f"/api/{kind.path}"
        guards = [auth_guard, Permission(kind.permission)]
        tags = [kind.label]

        @get("/")
        async def list_records(self, request: Request, db_session: AsyncSession) -> dict[str, Any]:
            """List records in every status, filtered by ``status`` if given."""
            settings = get_app_settings(request)
            filters = ListFilters.from_params(
                kind, query_dict(request), max_page_size=settings.drafts.max_page_size
            )
            page = await query_service.find_all(db_session, kind, filters)
            return wire_page(page, lambda record: editor_dict(kind, record))

        @get("/{record_id:int}")
        async def get_record(
            self,
            db_session: AsyncSession,
            record_id: int,
            include_draft: bool = Parameter(query="includeDraft", default=False),
        ) -> dict[str, Any]:
            record = await query_service.require_record(db_session, kind, record_id)
            if include_draft:
                return to_wire(preview_dict(kind, record))
            return _editor(record)

        @post("/")
        async def create_record(self, db_session: AsyncSession, data: dict[str, Any]) -> dict[str, Any]:
            body = _require_body(data)
            slug = body.pop("slug", None)
            if not isinstance(slug, str):
                raise ValidationError("'slug' is required")
            status = body.pop("status", "draft")
            record = await record_service.create_record(
                db_session, kind, slug, patch_from_wire(kind, body), status=status
            )
            return _editor(record)

        @patch("/{record_id:int}")
        async def update_record(
            self, request: Request, db_session: AsyncSession, record_id: int, data: dict[str, Any]
        ) -> dict[str, Any]:
            """Write published fields directly."""
            body = _require_body(data)
            expected_version = pop_expected_version(body, get_app_settings(request))
            slug = body.pop("slug", None)
            record = await record_service.update_record(
                db_session,
                kind,
                record_id,
                patch_from_wire(kind, body),
                slug=slug,
                expected_version=expected_version,
            )
            return _editor(record)

        @put("/{record_id:int}/draft")
        async def save_draft(
            self, request: Request, db_session: AsyncSession, record_id: int, data: dict[str, Any]
        ) -> dict[str, Any]:
            """Merge the body into the draft and answer with the preview view."""
            body = _require_body(data)
            expected_version = pop_expected_version(body, get_app_settings(request))
            record = await draft_service.create_draft(
                db_session,
                kind,
                record_id,
                patch_from_wire(kind, body),
                expected_version=expected_version,
            )
            return to_wire(preview_dict(kind, record))

        @delete("/{record_id:int}/draft", status_code=HTTP_200_OK)
        async def discard_draft(self, db_session: AsyncSession, record_id: int) -> dict[str, Any]:
            record = await draft_service.discard_draft(db_session, kind, record_id)
            return _editor(record)

        @post("/{record_id:int}/publish", status_code=HTTP_200_OK)
        async def publish(self, request: Request, db_session: AsyncSession, record_id: int) -> dict[str, Any]:
            # The body is optional; it only carries expectedVersion
            body = _require_body(await request.json() or {})
            expected_version = pop_expected_version(body, get_app_settings(request))
            record = await draft_service.publish(
                db_session, kind, record_id, expected_version=expected_version
            )
            return _editor(record)

        @post("/{record_id:int}/archive", status_code=HTTP_200_OK)
        async def archive(self, db_session: AsyncSession, record_id: int) -> dict[str, Any]:
            record = await record_service.archive_record(db_session, kind, record_id)
            return _editor(record)

        @delete("/{record_id:int}")
        async def delete_record(self, db_session: AsyncSession, record_id: int) -> None:
            await record_service.delete_record(db_session, kind, record_id)

        @get("/{record_id:int}/lock")
        async def get_lock(self, db_session: AsyncSession, record_id: int) -> dict[str, Any] | None:
            lock = await lock_service.get_lock(db_session, kind, record_id)
            return lock.to_dict() if lock is not None else None

        @post("/{record_id:int}/lock", status_code=HTTP_200_OK)
        async def acquire_lock(self, request: Request, db_session: AsyncSession, record_id: int) -> dict[str, Any]:
            settings = get_app_settings(request)
            lock = await lock_service.acquire_lock(
                db_session,
                kind,
                record_id,
                request.state.user.id,
                lock_duration=settings.drafts.lock_duration,
            )
            return lock.to_dict()

        @put("/{record_id:int}/lock")
        async def renew_lock(self, request: Request, db_session: AsyncSession, record_id: int) -> dict[str, Any]:
            settings = get_app_settings(request)
            lock = await lock_service.renew_lock(
                db_session,
                kind,
                record_id,
                request.state.user.id,
                lock_duration=settings.drafts.lock_duration,
            )
            return lock.to_dict()

        @delete("/{record_id:int}/lock", status_code=HTTP_200_OK)
        async def release_lock(
            self,
            request: Request,
            db_session: AsyncSession,
            record_id: int,
            force: bool = False,
        ) -> dict[str, bool]:
            """Release the caller's lock; ``force`` needs ``manage-locks``."""
            user = request.state.user
            override = force and has_permission(user.role, MANAGE_LOCKS)
            released = await lock_service.release_lock(
                db_session, kind, record_id, user.id, override=override
            )
            return {"released": released}

    _EditorContentController.__name__ = f"{kind.model.__name__}EditorController"
    return _EditorContentController
