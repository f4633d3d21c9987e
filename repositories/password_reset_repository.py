# Mongo wrapper for the reset challenge embedded on each user document.
#
# Every write is a single update_one/find_one_and_update whose filter pins the
# challenge the caller read (its code hash, and where it matters its attempt
# count), so two requests racing on one account cannot both apply.
from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument

from services.reset_policy import (
    RESET_ATTEMPTS_FIELD,
    RESET_CODE_FIELD,
    RESET_EXPIRY_FIELD,
    RESET_FIELDS,
)

_UNSET_CHALLENGE = {field: 1 for field in RESET_FIELDS}


class PasswordResetRepository:
    # Challenges live on the users collection itself.
    def __init__(self, db):
        self.collection = db["users"]

    # Replace whatever challenge exists with a fresh one.
    def start_challenge(self, user_id: ObjectId, code_hash: str, expires_at: datetime) -> bool:
        result = self.collection.update_one(
            {"_id": user_id},
            {
                "$set": {
                    RESET_CODE_FIELD: code_hash,
                    RESET_EXPIRY_FIELD: expires_at,
                    RESET_ATTEMPTS_FIELD: 0,
                }
            },
        )
        return result.matched_count == 1

    # Drop the challenge, but only if it is still the one we looked at.
    def purge_challenge(self, user_id: ObjectId, code_hash: str) -> bool:
        result = self.collection.update_one(
            {"_id": user_id, RESET_CODE_FIELD: code_hash},
            {"$unset": _UNSET_CHALLENGE},
        )
        return result.modified_count == 1

    def record_failed_attempt(self, user_id: ObjectId, code_hash: str, max_attempts: int) -> Optional[int]:
        """Atomically bump the attempt counter and return its new value.

        Returns None when the challenge was replaced, purged or already at the
        ceiling by the time the update ran.
        """
        doc = self.collection.find_one_and_update(
            {
                "_id": user_id,
                RESET_CODE_FIELD: code_hash,
                RESET_ATTEMPTS_FIELD: {"$lt": max_attempts},
            },
            {"$inc": {RESET_ATTEMPTS_FIELD: 1}},
            projection={RESET_ATTEMPTS_FIELD: 1},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return int(doc.get(RESET_ATTEMPTS_FIELD, 0))

    # Swap the password hash and clear the challenge in one update.
    def complete_reset(
        self,
        user_id: ObjectId,
        code_hash: str,
        attempts: Optional[int],
        now: datetime,
        password_hash: str,
    ) -> bool:
        result = self.collection.update_one(
            {
                "_id": user_id,
                RESET_CODE_FIELD: code_hash,
                RESET_ATTEMPTS_FIELD: attempts,
                RESET_EXPIRY_FIELD: {"$gte": now},
            },
            {
                "$set": {"password": password_hash},
                "$unset": _UNSET_CHALLENGE,
            },
        )
        return result.modified_count == 1
