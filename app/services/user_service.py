"""User profiles with encrypted PII, third-party profile imports and behavioral action history."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.encryption import decrypt_pii_fields, encrypt_pii_fields
from app.core.logging import get_logger
from app.models.users import User
from app.services.privacy_service import minimize_data

log = get_logger("user_service")

# Stored encrypted at rest; email stays plaintext for the unique lookup
ENCRYPTED_PROFILE_FIELDS = ("name", "address", "phone")

UPDATABLE_FIELDS = ("name", "address", "phone", "demographics", "preferences", "privacy_settings")

# Fields read from each third-party export; everything else is discarded on import
IMPORT_FIELDS = {
    "amazon": ("name", "address", "purchaseCategories"),
    "linkedin": ("name", "occupation", "industry", "education"),
    "facebook": ("name", "age", "location", "interests"),
}


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "address": user.address,
        "phone": user.phone,
        "demographics": user.demographics,
        "preferences": user.preferences,
        "privacy_settings": user.privacy_settings,
        "account_tier": user.account_tier,
    }


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, email: str, **profile: Any) -> User:
        fields = {k: v for k, v in profile.items() if k in UPDATABLE_FIELDS}
        fields = encrypt_pii_fields(fields, ENCRYPTED_PROFILE_FIELDS)
        user = User(email=email, action_history=[], **fields)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        log.info(f"Created user {user.id}")
        return user

    def get_profile(self, user_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        user = self.db.get(User, user_id)
        if not user:
            return None
        return decrypt_pii_fields(user_to_dict(user), ENCRYPTED_PROFILE_FIELDS)

    def update_profile(self, user_id: uuid.UUID, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply the supplied fields, encrypting PII, and return the decrypted profile."""
        user = self.db.get(User, user_id)
        if not user:
            return None

        changes = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        changes = encrypt_pii_fields(changes, ENCRYPTED_PROFILE_FIELDS)
        for field, value in changes.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        log.info(f"Updated profile fields {sorted(changes)} for user={user_id}")
        return decrypt_pii_fields(user_to_dict(user), ENCRYPTED_PROFILE_FIELDS)

    def track_action(self, user_id: uuid.UUID, action: str, details: Optional[Dict[str, Any]] = None) -> bool:
        user = self.db.get(User, user_id)
        if not user:
            return False

        entry = {
            "action": action,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        # New list so the JSON column change is detected
        user.action_history = [*(user.action_history or []), entry]
        self.db.commit()
        return True

    def import_from_service(self, user_id: uuid.UUID, service: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Fill the profile from a third-party export (amazon, linkedin or facebook).

        Only the fields listed in IMPORT_FIELDS are read. Imported demographics
        and preferences are merged into what the user already has, and values
        missing from the export never overwrite stored ones.

        Raises ValueError for an unsupported service; returns None for an unknown user.
        """
        if service not in IMPORT_FIELDS:
            raise ValueError(f"Unsupported import service: {service}")

        user = self.db.get(User, user_id)
        if not user:
            return None

        data = minimize_data(payload, IMPORT_FIELDS[service])
        imported = _map_import(service, data)

        changes: Dict[str, Any] = {
            k: v for k, v in imported.items() if k in ENCRYPTED_PROFILE_FIELDS and v is not None
        }
        for field in ("demographics", "preferences"):
            extra = {k: v for k, v in imported.get(field, {}).items() if v is not None}
            if extra:
                changes[field] = {**(getattr(user, field) or {}), **extra}

        log.info(f"Importing {sorted(changes)} from {service} for user={user_id}")
        return self.update_profile(user_id, changes)


def _map_import(service: str, data: Dict[str, Any]) -> Dict[str, Any]:
    if service == "amazon":
        return {
            "name": data.get("name"),
            "address": data.get("address"),
            "preferences": {"interest_categories": data.get("purchaseCategories")},
        }
    if service == "linkedin":
        return {
            "name": data.get("name"),
            "demographics": {
                "occupation": data.get("occupation"),
                "industry": data.get("industry"),
                "education": data.get("education"),
            },
        }
    return {
        "name": data.get("name"),
        "demographics": {"age": data.get("age"), "location": data.get("location")},
        "preferences": {"interest_categories": data.get("interests")},
    }
