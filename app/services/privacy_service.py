"""Privacy Service - PII discovery, anonymization, audit trail and data subject requests."""

from __future__ import annotations

import re
import uuid
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.encryption import decrypt_pii_fields, hash_pii
from app.core.logging import get_logger
from app.models.audit import AuditLog
from app.models.claims import Claim
from app.models.lawsuits import SavedSearch
from app.models.notifications import UserNotification
from app.models.users import User

log = get_logger("privacy_service")

PII_FIELDS = (
    "name",
    "email",
    "address",
    "phone",
    "social_security_number",
    "date_of_birth",
    "credit_card_number",
    "bank_account_number",
)

SENSITIVE_OPERATIONS = (
    "user_login",
    "user_logout",
    "user_registration",
    "password_reset",
    "profile_update",
    "claim_submission",
    "document_upload",
    "data_export",
    "data_import",
    "data_deletion",
    "privacy_settings_change",
    "admin_access",
)

REMOVED_ON_ANONYMIZE = frozenset({"credit_card_number", "bank_account_number", "social_security_number"})
HASHED_ON_ANONYMIZE = frozenset({"email", "name", "phone", "address"})

PHONE_PATTERN = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
SSN_PATTERN = re.compile(r"\d{3}[-.\s]?\d{2}[-.\s]?\d{4}")


def _looks_like_pii(value: Any) -> bool:
    text = str(value) if value else ""
    if "@" in text and "." in text:
        return True
    return bool(PHONE_PATTERN.search(text) or SSN_PATTERN.search(text))


def scan_for_pii(data: Dict[str, Any]) -> List[str]:
    """Fields holding PII, by known field name first and then by value shape."""
    found: List[str] = [field for field, value in data.items() if field.lower() in PII_FIELDS and value]
    for field, value in data.items():
        if field not in found and _looks_like_pii(value):
            found.append(field)
    return found


def minimize_data(data: Dict[str, Any], required_fields: Iterable[str]) -> Dict[str, Any]:
    return {field: data[field] for field in required_fields if field in data}


def anonymize_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``data`` safe for analytics.

    Financial identifiers and SSNs are dropped; direct identifiers are replaced
    with ``hashed:<field>:<hex16>`` so the same input always maps to the same
    token without being reversible.
    """
    result = dict(data)
    for field in scan_for_pii(data):
        lowered = field.lower()
        if lowered in REMOVED_ON_ANONYMIZE:
            del result[field]
        elif lowered in HASHED_ON_ANONYMIZE:
            digest = hash_pii(str(data[field]), purpose=lowered)[:16]
            result[field] = f"hashed:{field}:{digest}"
    return result


def _row_to_dict(row: Any) -> Dict[str, Any]:
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


class PrivacyService:
    def __init__(self, db: Session):
        self.db = db

    def log_audit_event(
        self,
        user_id: uuid.UUID,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> bool:
        """Append an audit row; direct identifiers in ``details`` are stored hashed."""
        if operation not in SENSITIVE_OPERATIONS:
            log.debug(f"Auditing non-standard operation {operation}")
        try:
            self.db.add(
                AuditLog(
                    user_id=user_id,
                    operation=operation,
                    details=anonymize_data(details or {}),
                    ip_address=ip_address,
                )
            )
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error(f"Failed to write audit event {operation} for user={user_id}: {e}")
            return False

    def handle_data_subject_request(
        self,
        user_id: uuid.UUID,
        request_type: str,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Serve a data subject request; returns ``{success, data?, message?}``."""
        user = self.db.get(User, user_id)
        if not user:
            return {"success": False, "message": f"User {user_id} not found."}

        if request_type == "access":
            result = self._export(user)
            self.log_audit_event(user_id, "data_export", {"request_type": request_type}, ip_address)
            return result

        if request_type == "erasure":
            result = self._erase(user)
            self.log_audit_event(user_id, "data_deletion", {"request_type": request_type}, ip_address)
            return result

        return {"success": False, "message": f"Request type '{request_type}' not implemented yet."}

    def _export(self, user: User) -> Dict[str, Any]:
        claims = self.db.execute(select(Claim).where(Claim.user_id == user.id)).scalars().all()
        searches = self.db.execute(select(SavedSearch).where(SavedSearch.user_id == user.id)).scalars().all()
        notifications = (
            self.db.execute(select(UserNotification).where(UserNotification.user_id == user.id)).scalars().all()
        )

        return {
            "success": True,
            "data": {
                "user": decrypt_pii_fields(_row_to_dict(user), PII_FIELDS),
                "claims": [_row_to_dict(c) for c in claims],
                "saved_searches": [_row_to_dict(s) for s in searches],
                "notifications": [_row_to_dict(n) for n in notifications],
            },
        }

    def _erase(self, user: User) -> Dict[str, Any]:
        user_id = user.id
        try:
            # Explicit deletes: not every backend enforces ON DELETE CASCADE
            for model in (UserNotification, SavedSearch, Claim):
                self.db.execute(delete(model).where(model.user_id == user_id))
            self.db.delete(user)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            log.exception(f"Erasure failed for user={user_id}")
            raise

        log.info(f"Erased all data for user={user_id}")
        return {"success": True, "message": "User data has been deleted successfully."}
