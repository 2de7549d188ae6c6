"""Filtered, paginated listings and single-record lookups for content kinds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wildtrip.db.content_kinds import FACET_WILDCARD, ContentKind
from wildtrip.db.models import ContentStatus
from wildtrip.lib.exceptions import NotFoundError, ValidationError
from wildtrip.lib.pagination import Paginated, Pagination

SortOrder = Literal["asc", "desc"]

STATUSES = tuple(status.value for status in ContentStatus)
DEFAULT_MAX_PAGE_SIZE = 100

# Query-string keys that are never facets
_RESERVED_PARAMS = {"page", "limit", "pageSize", "search", "status", "sortBy", "sortOrder"}


def _to_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{name}' must be an integer") from None


@dataclass
class ListFilters:
    """Listing parameters for one content kind.

    ``status=None`` lists every status and is only meant for editor views;
    public callers always force ``published``.
    """

    page: int = 1
    limit: int | None = None
    search: str | None = None
    status: str | None = None
    facets: dict[str, str] = field(default_factory=dict)
    sort_by: str | None = None
    sort_order: SortOrder = "desc"

    @classmethod
    def from_params(
        cls,
        kind: ContentKind,
        params: Mapping[str, Any],
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ) -> ListFilters:
        """Parse query-string style parameters.

        ``limit`` and ``pageSize`` are synonyms. Unknown facets, invalid facet
        values and invalid sort keys are dropped rather than rejected.
        """
        page = _to_int(params.get("page", 1), "page")
        raw_limit = params.get("limit", params.get("pageSize"))
        limit = _to_int(raw_limit, "limit") if raw_limit not in (None, "") else None

        facets = {
            name: value
            for name, value in params.items()
            if name not in _RESERVED_PARAMS and name in kind.facets and value not in (None, "")
        }

        sort_order = str(params.get("sortOrder", "desc")).lower()

        filters = cls(
            page=page,
            limit=limit,
            search=params.get("search") or None,
            status=params.get("status") or None,
            facets=facets,
            sort_by=params.get("sortBy") or None,
            sort_order="asc" if sort_order == "asc" else "desc",
        )
        filters.validate(max_page_size)
        return filters

    def validate(self, max_page_size: int = DEFAULT_MAX_PAGE_SIZE) -> None:
        if self.page < 1:
            raise ValidationError("'page' must be at least 1")
        if self.limit is not None:
            if self.limit < 1:
                raise ValidationError("'limit' must be a positive integer")
            self.limit = min(self.limit, max_page_size)

    def page_size(self, kind: ContentKind) -> int:
        return self.limit or kind.default_limit


def build_conditions(kind: ContentKind, filters: ListFilters) -> list:
    """WHERE clauses for a listing, combined by the caller with AND."""
    conditions = []

    if filters.status in STATUSES:
        conditions.append(kind.column("status") == filters.status)

    for facet, value in filters.facets.items():
        if value == FACET_WILDCARD or not kind.valid_facet_value(facet, value):
            continue
        conditions.append(kind.facet_column(facet) == value)

    if filters.search:
        term = filters.search.strip()
        if term:
            conditions.append(
                or_(*[kind.column(name).icontains(term, autoescape=True) for name in kind.search_fields])
            )

    return conditions


def build_ordering(kind: ContentKind, filters: ListFilters) -> list:
    """ORDER BY clauses; ``id`` ascending always breaks ties."""
    attribute = kind.sort_fields.get(filters.sort_by or "", "created_at")
    column = kind.column(attribute)
    primary = column.asc() if filters.sort_order == "asc" else column.desc()
    if attribute == "published_at":
        primary = primary.nulls_last()
    return [primary, kind.column("id").asc()]


async def find_all(
    db_session: AsyncSession,
    kind: ContentKind,
    filters: ListFilters | None = None,
) -> Paginated:
    """List records of a kind with filtering, sorting and pagination.

    The total is computed with a window function in the same statement as the
    page of rows, so count and data come from one snapshot.

    Args:
        db_session: Database session
        kind: Content kind to list
        filters: Listing parameters (defaults to the first page, all statuses)

    Returns:
        Paginated envelope of model instances
    """
    filters = filters or ListFilters()
    page_size = filters.page_size(kind)
    offset = (filters.page - 1) * page_size
    conditions = build_conditions(kind, filters)

    total_count = func.count().over().label("total_count")
    query = select(kind.model, total_count)
    if conditions:
        query = query.where(and_(*conditions))
    query = query.order_by(*build_ordering(kind, filters)).limit(page_size).offset(offset)

    result = await db_session.execute(query)
    rows = result.all()

    records = [row[0] for row in rows]
    if rows:
        total = rows[0].total_count
    elif filters.page > 1:
        # Past the last page: the window yields nothing to read the total from
        total = await count(db_session, kind, conditions)
    else:
        total = 0

    return Paginated(data=records, pagination=Pagination.build(filters.page, page_size, total))


async def count(db_session: AsyncSession, kind: ContentKind, conditions: list | None = None) -> int:
    query = select(func.count()).select_from(kind.model)
    if conditions:
        query = query.where(and_(*conditions))
    result = await db_session.execute(query)
    return result.scalar() or 0


async def find_by_id(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    published_only: bool = False,
) -> Any | None:
    """Get a single record by ID, or None."""
    query = select(kind.model).where(kind.column("id") == record_id)
    if published_only:
        query = query.where(kind.column("status") == ContentStatus.PUBLISHED)
    result = await db_session.execute(query.execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def find_by_slug(
    db_session: AsyncSession,
    kind: ContentKind,
    slug: str,
    published_only: bool = False,
) -> Any | None:
    """Get a single record by slug, or None."""
    query = select(kind.model).where(kind.column("slug") == slug)
    if published_only:
        query = query.where(kind.column("status") == ContentStatus.PUBLISHED)
    result = await db_session.execute(query.execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def require_record(
    db_session: AsyncSession,
    kind: ContentKind,
    record_id: int,
    for_update: bool = False,
) -> Any:
    """Load a record or raise NotFoundError.

    With ``for_update`` the row is locked (``SELECT ... FOR UPDATE``) until the
    surrounding transaction ends, on backends that support row locks.
    """
    query = select(kind.model).where(kind.column("id") == record_id)
    if for_update:
        query = query.with_for_update()
    result = await db_session.execute(query.execution_options(populate_existing=True))
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFoundError(f"{kind.label} {record_id} not found")
    return record
