# Generate one-time numeric codes for password recovery.
import secrets

RESET_CODE_MIN = 100000
RESET_CODE_MAX = 999999


def generate_reset_code() -> str:
    """Return a uniformly random 6-digit code as a string."""
    return str(RESET_CODE_MIN + secrets.randbelow(RESET_CODE_MAX - RESET_CODE_MIN + 1))
