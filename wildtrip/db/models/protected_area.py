from typing import Any

from advanced_alchemy.types import JsonB
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wildtrip.db.base import Base
from wildtrip.db.models.content import ContentRecordMixin


class ProtectedArea(ContentRecordMixin, Base):
    """A national park, reserve, monument or sanctuary."""

    __tablename__ = "protected_areas"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    area_type: Mapped[str | None] = mapped_column("type", String(50), nullable=True, index=True)
    region: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)

    location: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)  # GeoJSON
    area: Mapped[int | None] = mapped_column(Integer, nullable=True)  # hectares
    creation_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    ecosystems: Mapped[list[str] | None] = mapped_column(JsonB, nullable=True)
    key_species: Mapped[list[int] | None] = mapped_column(JsonB, nullable=True)
    visitor_information: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)
    rich_content: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)

    main_image: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)
    gallery_images: Mapped[list[dict[str, Any]] | None] = mapped_column(JsonB, nullable=True)
