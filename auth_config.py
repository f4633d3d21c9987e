# Small helper to gather authentication-related environment settings.
from __future__ import annotations

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# Frozen dataclass ensures auth defaults stay immutable at runtime.
@dataclass(frozen=True)
class AuthConfig:
    password_min_length: int = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))
    reset_code_ttl_minutes: int = int(os.getenv("PASSWORD_RESET_CODE_TTL_MINUTES", "15"))
    reset_max_attempts: int = int(os.getenv("PASSWORD_RESET_MAX_ATTEMPTS", "5"))
    # argon2 time cost; the reset path hashes the new password one notch harder.
    hash_rounds: int = int(os.getenv("PASSWORD_HASH_ROUNDS", "3"))
    reset_hash_rounds: int = int(os.getenv("PASSWORD_RESET_HASH_ROUNDS", "4"))
    # Debug only: echo the plaintext reset code back outside production.
    dev_reset_code_echo: bool = _env_flag("PASSWORD_RESET_DEV_ECHO")


# Instantiate once so other modules can import a shared config.
auth_config = AuthConfig()
