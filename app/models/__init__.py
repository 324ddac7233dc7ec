from app.models.base import Base
from app.models.users import User
from app.models.lawsuits import Defendant, Lawsuit, SavedSearch
from app.models.claims import Claim, CLAIM_STATUSES
from app.models.data_sources import DataSource, empty_success_history
from app.models.notifications import UserNotification
from app.models.audit import AuditLog
from app.models.runs import AcquisitionRun

__all__ = [
    "Base",
    "User",
    "Lawsuit",
    "Defendant",
    "SavedSearch",
    "Claim",
    "CLAIM_STATUSES",
    "DataSource",
    "empty_success_history",
    "UserNotification",
    "AuditLog",
    "AcquisitionRun",
]
