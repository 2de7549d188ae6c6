"""Columns shared by every editable content kind."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from advanced_alchemy.types import DateTimeUTC, JsonB
from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class ContentStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ContentRecordMixin:
    """Identity, lifecycle, draft overlay and edit lock columns.

    ``draft_data`` is a partial overlay of the published columns. Keys that are
    absent fall back to the live value; keys that are present (even with a
    ``None`` value) replace it when the record is published.
    """

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContentStatus.DRAFT, index=True
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)

    # SEO
    seo_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    seo_keywords: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Draft overlay
    draft_data: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)
    has_draft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    draft_created_at: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)

    # Bumped by every draft write and publish
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Advisory edit lock
    locked_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    locked_at: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)
    lock_expires_at: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED

    def lock_is_valid(self, now: datetime) -> bool:
        """True while a holder is set and the lock has not expired."""
        return (
            self.locked_by is not None
            and self.lock_expires_at is not None
            and self.lock_expires_at > now
        )
