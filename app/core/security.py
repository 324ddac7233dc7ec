"""Request-level security helpers: headers, bot scoring, upload checks, tokens."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

ALLOWED_UPLOAD_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/jpg",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

ALLOWED_UPLOAD_EXTENSIONS = {"pdf", "jpeg", "jpg", "png", "doc", "docx"}

BOT_USER_AGENT_MARKERS = ("bot", "crawler", "spider", "headless")

_TOKEN_ALPHABET = string.ascii_letters + string.digits


@dataclass
class BotAssessment:
    is_bot: bool
    confidence: float
    reason: str


@dataclass
class FileValidation:
    is_valid: bool
    reason: Optional[str] = None


def detect_bot(request_frequency: float, request_pattern: Sequence[str], user_agent: str) -> BotAssessment:
    """Score a client as a bot from request rate, path repetition and user agent.

    ``request_frequency`` is requests per minute. A score of 0.5 or more marks
    the client as a bot; the score itself is returned as ``confidence``.
    """
    score = 0.0
    reasons = []

    if request_frequency > 60:
        score += 0.4
        reasons.append("High request frequency.")
    elif request_frequency > 30:
        score += 0.2
        reasons.append("Moderate request frequency.")

    if request_pattern:
        ratio = len(set(request_pattern)) / len(request_pattern)
        if ratio < 0.1:
            score += 0.3
            reasons.append("Repetitive request pattern.")

    agent = (user_agent or "").lower()
    if any(marker in agent for marker in BOT_USER_AGENT_MARKERS):
        score += 0.5
        reasons.append("Bot-like user agent.")

    score = round(score, 2)
    return BotAssessment(is_bot=score >= 0.5, confidence=score, reason=" ".join(reasons))


def validate_secure_file(file_name: str, file_size: int, file_type: str) -> FileValidation:
    if file_size > MAX_UPLOAD_BYTES:
        return FileValidation(False, "File size exceeds maximum allowed (10MB).")

    if file_type not in ALLOWED_UPLOAD_TYPES:
        return FileValidation(False, "File type not allowed. Allowed types: PDF, JPEG, PNG, DOC, DOCX.")

    parts = file_name.split(".")
    extension = parts[-1].lower() if len(parts) > 1 else ""
    if extension not in ALLOWED_UPLOAD_EXTENSIONS:
        return FileValidation(
            False,
            "File extension not allowed. Allowed extensions: .pdf, .jpeg, .jpg, .png, .doc, .docx.",
        )

    if len(parts) > 2:
        return FileValidation(False, "Multiple file extensions not allowed.")

    return FileValidation(True)


def generate_secure_token(length: int = 32) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def get_security_headers() -> Dict[str, str]:
    return {
        "Content-Security-Policy": (
            "default-src 'self'; script-src 'self'; style-src 'self'; "
            "img-src 'self' data:; font-src 'self'; connect-src 'self';"
        ),
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "camera=(), microphone=(), geolocation=(self)",
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    }
