# Error taxonomy for the password recovery flow, mapped to HTTP statuses.
from __future__ import annotations

from typing import Any, Dict, Optional


class PasswordResetError(Exception):
    status_code = 400
    default_message = "Password reset failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        return {"message": self.message}


# Missing or malformed input.
class ValidationError(PasswordResetError):
    default_message = "All fields are required"


# Input is well formed but breaks a stated policy (minimum length, ...).
class PolicyError(PasswordResetError):
    default_message = "Password does not meet the password policy"


# No resolvable challenge. Covers "no such account" and "nothing pending" alike.
class InvalidRequestError(PasswordResetError):
    default_message = "Invalid or expired reset request"


class ExpiredError(PasswordResetError):
    default_message = "Reset code has expired. Please request a new one."


class AttemptsExhaustedError(PasswordResetError):
    status_code = 429
    default_message = "Too many failed attempts. Please request a new reset code."


class InvalidCodeError(PasswordResetError):
    def __init__(self, remaining_attempts: int):
        self.remaining_attempts = remaining_attempts
        super().__init__(f"Invalid reset code. {remaining_attempts} attempts remaining.")


# The account store failed; details stay in the server log.
class StorageError(PasswordResetError):
    status_code = 500
