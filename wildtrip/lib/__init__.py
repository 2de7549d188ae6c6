from wildtrip.lib.exceptions import (
    ContentError,
    ForbiddenError,
    InvalidStateError,
    LockConflictError,
    NotFoundError,
    ValidationError,
)
from wildtrip.lib.pagination import Paginated, Pagination

__all__ = [
    "ContentError",
    "ForbiddenError",
    "InvalidStateError",
    "LockConflictError",
    "NotFoundError",
    "Paginated",
    "Pagination",
    "ValidationError",
]
