from typing import Any

from advanced_alchemy.types import JsonB
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wildtrip.db.base import Base
from wildtrip.db.models.content import ContentRecordMixin


class Species(ContentRecordMixin, Base):
    """A species profile."""

    __tablename__ = "species"

    common_name: Mapped[str] = mapped_column(String(255), nullable=False)
    scientific_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Taxonomy
    kingdom: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phylum: Mapped[str | None] = mapped_column(String(100), nullable=True)
    class_name: Mapped[str | None] = mapped_column("class", String(100), nullable=True)
    order_name: Mapped[str | None] = mapped_column("order", String(100), nullable=True)
    family: Mapped[str | None] = mapped_column(String(100), nullable=True)
    main_group: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    specific_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    conservation_status: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)

    # Descriptive content
    habitat: Mapped[str | None] = mapped_column(Text, nullable=True)
    distribution: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    distinctive_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    rich_content: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)
    references: Mapped[list[dict[str, Any]] | None] = mapped_column(JsonB, nullable=True)

    # Images: {"id", "url", "galleryId"}
    main_image: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)
    gallery_images: Mapped[list[dict[str, Any]] | None] = mapped_column(JsonB, nullable=True)
