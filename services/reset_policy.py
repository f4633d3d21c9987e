# Pure helpers shared by the reset request and reset confirmation paths.
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from services.errors import ValidationError

RESET_CODE_FIELD = "password_reset_code"
RESET_EXPIRY_FIELD = "password_reset_expiry"
RESET_ATTEMPTS_FIELD = "password_reset_attempts"
RESET_FIELDS = (RESET_CODE_FIELD, RESET_EXPIRY_FIELD, RESET_ATTEMPTS_FIELD)


def clean_identifier(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def require_identifiers(handle: Any, user_name: Any) -> Tuple[str, str]:
    """Trim both identifiers and insist that neither is blank."""
    cleaned_handle = clean_identifier(handle)
    cleaned_name = clean_identifier(user_name)
    if not cleaned_handle or not cleaned_name:
        raise ValidationError("Both handle and display name are required")
    return cleaned_handle, cleaned_name


def require_fields(**fields: Any) -> None:
    for value in fields.values():
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("All fields are required")


def challenge_expiry(now: datetime, ttl_minutes: int) -> datetime:
    return now + timedelta(minutes=ttl_minutes)


def is_expired(expires_at: datetime, now: datetime) -> bool:
    return now > expires_at


def attempts_exhausted(attempts: Optional[int], max_attempts: int) -> bool:
    return (attempts or 0) >= max_attempts


def remaining_attempts(attempts_after: int, max_attempts: int) -> int:
    return max(0, max_attempts - attempts_after)


def has_active_challenge(doc: Optional[Dict[str, Any]]) -> bool:
    if not doc:
        return False
    return bool(doc.get(RESET_CODE_FIELD)) and doc.get(RESET_EXPIRY_FIELD) is not None
