# Service layer for issuing and fulfilling password reset challenges.
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from pymongo.errors import PyMongoError

from auth_config import AuthConfig, auth_config
from config.settings import settings
from repositories.password_reset_repository import PasswordResetRepository
from repositories.user_repository import UserRepository
from services.auth_service import (
    hash_password_for_reset,
    hash_reset_code,
    validate_password_strength,
    verify_password,
)
from services.errors import (
    AttemptsExhaustedError,
    ExpiredError,
    InvalidCodeError,
    InvalidRequestError,
    StorageError,
)
from services.reset_policy import (
    RESET_ATTEMPTS_FIELD,
    RESET_CODE_FIELD,
    RESET_EXPIRY_FIELD,
    attempts_exhausted,
    challenge_expiry,
    has_active_challenge,
    is_expired,
    remaining_attempts,
    require_fields,
    require_identifiers,
)
from utils.codes import generate_reset_code

logger = logging.getLogger(__name__)

# Same text whether or not the account exists.
RESET_REQUESTED_MESSAGE = "If an account with those credentials exists, a reset code has been generated."
RESET_SUCCESS_MESSAGE = "success"


@dataclass(frozen=True)
class ResetRequestResult:
    message: str = RESET_REQUESTED_MESSAGE
    # Only populated when the development echo is switched on.
    dev_reset_code: Optional[str] = None


class PasswordResetService:
    # Wire up the repos plus the clock and code source so tests can pin them.
    def __init__(
        self,
        db,
        clock: Callable[[], datetime] = datetime.utcnow,
        code_generator: Callable[[], str] = generate_reset_code,
        config: AuthConfig = auth_config,
        production: Optional[bool] = None,
    ):
        self.user_repo = UserRepository(db)
        self.reset_repo = PasswordResetRepository(db)
        self.clock = clock
        self.code_generator = code_generator
        self.config = config
        self.production = settings.is_production if production is None else production

    @property
    def echo_dev_code(self) -> bool:
        return self.config.dev_reset_code_echo and not self.production

    # Mint a new challenge for the matching account, if there is one.
    def request_reset(self, handle: Optional[str], user_name: Optional[str]) -> ResetRequestResult:
        handle, user_name = require_identifiers(handle, user_name)
        try:
            return self._issue_challenge(handle, user_name)
        except PyMongoError as exc:
            logger.exception("Password reset request failed for handle=%s", handle)
            raise StorageError("Password reset request failed") from exc

    def _issue_challenge(self, handle: str, user_name: str) -> ResetRequestResult:
        account = self.user_repo.find_by_identifiers(handle, user_name)
        code = self.code_generator()
        code_hash = hash_reset_code(code)
        if not account:
            # The hash above already ran, so both branches cost about the same.
            logger.info("Password reset requested for unknown identifiers")
            return ResetRequestResult()

        expires_at = challenge_expiry(self.clock(), self.config.reset_code_ttl_minutes)
        self.reset_repo.start_challenge(account["_id"], code_hash, expires_at)
        logger.info("Password reset challenge issued for handle=%s", handle)

        if not self.echo_dev_code:
            return ResetRequestResult()
        logger.info(
            "Password reset code for %s: %s (expires in %d min)",
            handle,
            code,
            self.config.reset_code_ttl_minutes,
        )
        return ResetRequestResult(dev_reset_code=code)

    # Check the code against the live challenge and swap the password hash.
    def reset_password(
        self,
        handle: Optional[str],
        user_name: Optional[str],
        reset_code: Optional[str],
        new_password: Optional[str],
    ) -> str:
        require_fields(handle=handle, user_name=user_name, reset_code=reset_code, new_password=new_password)
        validate_password_strength(new_password)
        handle, user_name = require_identifiers(handle, user_name)
        try:
            return self._consume_challenge(handle, user_name, reset_code.strip(), new_password)
        except PyMongoError as exc:
            logger.exception("Password reset failed for handle=%s", handle)
            raise StorageError("Password reset failed") from exc

    def _consume_challenge(self, handle: str, user_name: str, reset_code: str, new_password: str) -> str:
        account = self.user_repo.find_by_identifiers(handle, user_name, include_reset_fields=True)
        if not has_active_challenge(account):
            raise InvalidRequestError()

        user_id = account["_id"]
        code_hash = account[RESET_CODE_FIELD]
        attempts = account.get(RESET_ATTEMPTS_FIELD)
        now = self.clock()

        if is_expired(account[RESET_EXPIRY_FIELD], now):
            self.reset_repo.purge_challenge(user_id, code_hash)
            logger.info("Expired password reset challenge purged for handle=%s", handle)
            raise ExpiredError()

        if attempts_exhausted(attempts, self.config.reset_max_attempts):
            self.reset_repo.purge_challenge(user_id, code_hash)
            logger.warning("Password reset attempts exhausted for handle=%s", handle)
            raise AttemptsExhaustedError()

        if not verify_password(reset_code, code_hash):
            attempts_after = self.reset_repo.record_failed_attempt(
                user_id, code_hash, self.config.reset_max_attempts
            )
            if attempts_after is None:
                self._raise_for_lost_attempt(user_id, code_hash, handle)
            remaining = remaining_attempts(attempts_after, self.config.reset_max_attempts)
            logger.info("Invalid password reset code for handle=%s, %d attempts remaining", handle, remaining)
            raise InvalidCodeError(remaining)

        password_hash = hash_password_for_reset(new_password)
        if not self.reset_repo.complete_reset(user_id, code_hash, attempts, now, password_hash):
            # Another request consumed or changed the challenge first.
            logger.warning("Password reset lost a concurrent update for handle=%s", handle)
            raise InvalidRequestError()

        logger.info("Password reset successful for handle=%s", handle)
        return RESET_SUCCESS_MESSAGE

    # The guarded increment matched nothing: either a racing guess spent the
    # last attempt on this challenge, or the challenge is gone or replaced.
    def _raise_for_lost_attempt(self, user_id, code_hash: str, handle: str) -> None:
        current = self.user_repo.find_by_id(user_id, include_reset_fields=True)
        if (
            current
            and current.get(RESET_CODE_FIELD) == code_hash
            and attempts_exhausted(current.get(RESET_ATTEMPTS_FIELD), self.config.reset_max_attempts)
        ):
            self.reset_repo.purge_challenge(user_id, code_hash)
            logger.warning("Password reset attempts exhausted for handle=%s", handle)
            raise AttemptsExhaustedError()
        raise InvalidRequestError()
