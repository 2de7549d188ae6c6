"""Controller factory for the public, published-only JSON API."""

from __future__ import annotations

from typing import Any

from litestar import Controller, Request, get
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.controllers.helpers import get_app_settings, query_dict
from wildtrip.db.content_kinds import ContentKind
from wildtrip.db.services import public_service
from wildtrip.db.services.serializers import to_wire


def create_public_controller(kind: ContentKind) -> type[Controller]:
    """Create a public Controller subclass for one content kind.

    Routes under ``/api/public/{path}``. Lookups that resolve to nothing
    answer ``null`` with status 200 so the site can render a placeholder.
    """

    class _PublicContentController(Controller):
        path = f"/api/public/{kind.path}"
        tags = [kind.label]

        @get("/")
        async def list_published(self, request: Request, db_session: AsyncSession) -> dict[str, Any]:
            settings = get_app_settings(request)
            page = await public_service.find_published(
                db_session,
                kind,
                query_dict(request),
                max_page_size=settings.drafts.max_page_size,
            )
            return {
                "data": [to_wire(item) for item in page.data],
                "pagination": page.pagination.to_dict(),
            }

        @get("/latest")
        async def latest(self, db_session: AsyncSession, limit: int = 3) -> list[dict[str, Any]]:
            items = await public_service.get_last_published(db_session, kind, limit=max(1, min(limit, 20)))
            return [to_wire(item) for item in items]

        @get("/count")
        async def total(self, db_session: AsyncSession) -> dict[str, int]:
            return {"total": await public_service.get_total_published(db_session, kind)}

        @get("/slug/{slug:str}")
        async def by_slug(self, db_session: AsyncSession, slug: str) -> dict[str, Any] | None:
            item = await public_service.find_by_slug(db_session, kind, slug)
            return to_wire(item) if item is not None else None

        @get("/{record_id:int}")
        async def by_id(self, db_session: AsyncSession, record_id: int) -> dict[str, Any] | None:
            item = await public_service.find_by_id(db_session, kind, record_id)
            return to_wire(item) if item is not None else None

    _PublicContentController.__name__ = f"Public{kind.model.__name__}Controller"
    return _PublicContentController
