from __future__ import annotations

from passlib.context import CryptContext

from auth_config import auth_config
from services.errors import PolicyError

# The "reset" category hashes replacement passwords at a higher time cost.
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__default_rounds=auth_config.hash_rounds,
    reset__argon2__default_rounds=auth_config.reset_hash_rounds,
)


def hash_password_for_reset(password: str) -> str:
    return pwd_context.hash(password, category="reset")


def hash_reset_code(code: str) -> str:
    return pwd_context.hash(code)


def verify_password(password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(password, hashed_password)
    except ValueError:
        # Unrecognised or corrupted hash material never matches.
        return False


def validate_password_strength(password: str) -> None:
    if len(password) < auth_config.password_min_length:
        raise PolicyError(f"Password must be at least {auth_config.password_min_length} characters")
