from typing import Any

from advanced_alchemy.types import JsonB
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wildtrip.db.base import Base
from wildtrip.db.models.content import ContentRecordMixin


class News(ContentRecordMixin, Base):
    """A news article."""

    __tablename__ = "news"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JsonB, nullable=True)

    main_image: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)
