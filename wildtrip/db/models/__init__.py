from wildtrip.db.models.content import ContentRecordMixin, ContentStatus
from wildtrip.db.models.news import News
from wildtrip.db.models.protected_area import ProtectedArea
from wildtrip.db.models.species import Species
from wildtrip.db.models.user import User

__all__ = ["ContentRecordMixin", "ContentStatus", "News", "ProtectedArea", "Species", "User"]
