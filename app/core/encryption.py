"""Field-level PII encryption and keyed hashing."""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Dict, Iterable, Optional

from cryptography.fernet import Fernet, InvalidToken

from app.core.config import settings

ENCRYPTED_PREFIX = "enc:"

_fernet: Optional[Fernet] = None


def get_fernet() -> Fernet:
    """Get or create the Fernet instance for PII encryption."""
    global _fernet
    if _fernet is None:
        if not settings.DATA_ENCRYPTION_KEY:
            raise RuntimeError(
                "DATA_ENCRYPTION_KEY not configured. "
                'Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"'
            )
        _fernet = Fernet(settings.DATA_ENCRYPTION_KEY.encode())
    return _fernet


def is_encrypted(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(ENCRYPTED_PREFIX)


def encrypt_pii(value: str) -> str:
    """Encrypt a single PII value. Already-encrypted values are returned as-is."""
    if value == "" or is_encrypted(value):
        return value
    token = get_fernet().encrypt(value.encode()).decode()
    return f"{ENCRYPTED_PREFIX}{token}"


def decrypt_pii(value: str) -> str:
    """Decrypt a PII value. Plaintext values pass through unchanged."""
    if not is_encrypted(value):
        return value
    token = value[len(ENCRYPTED_PREFIX):]
    try:
        return get_fernet().decrypt(token.encode()).decode()
    except InvalidToken:
        raise ValueError("Invalid or corrupted encrypted data")


def encrypt_pii_fields(data: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Return a copy of ``data`` with the truthy ``fields`` encrypted."""
    result = dict(data)
    for field in fields:
        if result.get(field):
            result[field] = encrypt_pii(str(result[field]))
    return result


def decrypt_pii_fields(data: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Return a copy of ``data`` with encrypted ``fields`` decrypted."""
    result = dict(data)
    for field in fields:
        if is_encrypted(result.get(field)):
            result[field] = decrypt_pii(result[field])
    return result


def hash_pii(value: str, purpose: str = "pii") -> str:
    """Hash PII deterministically (HMAC-SHA256) for anonymized analytics."""
    if not settings.PII_HASH_KEY:
        raise RuntimeError("PII_HASH_KEY not configured.")
    data = f"{purpose}:{value}".encode()
    return hmac.new(settings.PII_HASH_KEY.encode(), data, hashlib.sha256).hexdigest()


def is_pii_encryption_configured() -> bool:
    return bool(settings.DATA_ENCRYPTION_KEY and settings.PII_HASH_KEY)
