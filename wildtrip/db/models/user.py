from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wildtrip.db.base import Base


class User(Base):
    """Editor or reader account mirrored from the identity provider."""

    __tablename__ = "users"

    external_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="user")
