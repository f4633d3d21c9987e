# Mongo-backed repository for reading user records.
from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId

from services.reset_policy import RESET_FIELDS

# Reset challenge material never leaves the store unless asked for explicitly.
DEFAULT_PROJECTION = {field: 0 for field in RESET_FIELDS}


class UserRepository:
    # Maintain a handle to the users collection.
    def __init__(self, db):
        self.collection = db["users"]

    # Fetch by Mongo id (string or ObjectId).
    def find_by_id(self, user_id: str | ObjectId, include_reset_fields: bool = False) -> Optional[Dict[str, Any]]:
        oid = ObjectId(user_id) if isinstance(user_id, str) else user_id
        projection = None if include_reset_fields else DEFAULT_PROJECTION
        return self.collection.find_one({"_id": oid}, projection)

    # Look up the single account matching both the handle and the display name.
    def find_by_identifiers(
        self, handle: str, user_name: str, include_reset_fields: bool = False
    ) -> Optional[Dict[str, Any]]:
        projection = None if include_reset_fields else DEFAULT_PROJECTION
        return self.collection.find_one({"handle": handle, "user_name": user_name}, projection)
