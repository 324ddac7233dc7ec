# Services package
from app.services.acquisition_service import AcquisitionService
from app.services.data_source_service import DataSourceService
from app.services.lawsuit_service import LawsuitService
from app.services.notification_service import NotificationService
from app.services.privacy_service import PrivacyService
from app.services.user_service import UserService

__all__ = [
    "AcquisitionService",
    "DataSourceService",
    "LawsuitService",
    "NotificationService",
    "PrivacyService",
    "UserService",
]
