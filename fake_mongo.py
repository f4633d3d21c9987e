# In-memory stand-in for the slice of the pymongo API the recovery flow touches.
from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

_MISSING = object()


class FakeCollection:

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.fail_on: set[str] = set()
        self.update_calls: List[Dict[str, Any]] = []

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise PyMongoError(f"simulated failure in {operation}")

    @staticmethod
    def _matches_value(actual: Any, expected: Any) -> bool:
        if isinstance(expected, dict) and any(key.startswith("$") for key in expected):
            for op, operand in expected.items():
                if op == "$lt":
                    if actual is _MISSING or actual is None or not actual < operand:
                        return False
                elif op == "$gt":
                    if actual is _MISSING or actual is None or not actual > operand:
                        return False
                elif op == "$gte":
                    if actual is _MISSING or actual is None or not actual >= operand:
                        return False
                elif op == "$exists":
                    if (actual is not _MISSING) != bool(operand):
                        return False
                else:
                    raise NotImplementedError(op)
            return True
        if expected is None:
            return actual is _MISSING or actual is None
        return actual is not _MISSING and actual == expected

    def _matches(self, doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
        return all(self._matches_value(doc.get(key, _MISSING), expected) for key, expected in query.items())

    @staticmethod
    def _project(doc: Dict[str, Any], projection: Optional[Dict[str, int]]) -> Dict[str, Any]:
        doc = copy.deepcopy(doc)
        if not projection:
            return doc
        include = {key for key, flag in projection.items() if flag}
        if include:
            if projection.get("_id", 1):
                include.add("_id")
            return {key: value for key, value in doc.items() if key in include}
        return {key: value for key, value in doc.items() if key not in projection}

    @staticmethod
    def _apply(doc: Dict[str, Any], update: Dict[str, Any]) -> None:
        for op, fields in update.items():
            if op == "$set":
                doc.update(copy.deepcopy(fields))
            elif op == "$unset":
                for key in fields:
                    doc.pop(key, None)
            elif op == "$inc":
                for key, amount in fields.items():
                    doc[key] = doc.get(key, 0) + amount
            else:
                raise NotImplementedError(op)

    def _first(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for doc in self.docs:
            if self._matches(doc, query):
                return doc
        return None

    def create_index(self, *_, **__) -> str:
        return "fake_index"

    def insert_one(self, doc: Dict[str, Any]):
        self._maybe_fail("insert_one")
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    def insert_many(self, docs: Iterable[Dict[str, Any]]) -> None:
        for doc in docs:
            self.insert_one(doc)

    def find_one(self, query: Dict[str, Any], projection: Optional[Dict[str, int]] = None):
        self._maybe_fail("find_one")
        doc = self._first(query)
        return self._project(doc, projection) if doc is not None else None

    def update_one(self, query: Dict[str, Any], update: Dict[str, Any]):
        self._maybe_fail("update_one")
        self.update_calls.append({"filter": copy.deepcopy(query), "update": copy.deepcopy(update)})
        doc = self._first(query)
        if doc is None:
            return SimpleNamespace(matched_count=0, modified_count=0)
        before = copy.deepcopy(doc)
        self._apply(doc, update)
        return SimpleNamespace(matched_count=1, modified_count=int(doc != before))

    def find_one_and_update(
        self,
        query: Dict[str, Any],
        update: Dict[str, Any],
        projection: Optional[Dict[str, int]] = None,
        return_document=ReturnDocument.BEFORE,
    ):
        self._maybe_fail("find_one_and_update")
        self.update_calls.append({"filter": copy.deepcopy(query), "update": copy.deepcopy(update)})
        doc = self._first(query)
        if doc is None:
            return None
        before = self._project(doc, projection)
        self._apply(doc, update)
        if return_document == ReturnDocument.AFTER:
            return self._project(doc, projection)
        return before


class FakeDatabase:

    def __init__(self):
        self._collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())
