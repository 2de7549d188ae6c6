"""Declarative base shared by every mapped class."""

from advanced_alchemy.base import BigIntAuditBase


class Base(BigIntAuditBase):
    """Integer primary key plus UTC ``created_at`` / ``updated_at`` columns."""

    __abstract__ = True
