"""Repository for the `focus-sessions` collection."""

from __future__ import annotations

from typing import Union

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.collection import Collection

from schemas.models.base import to_object_id
from schemas.models.focus import FocusSessionDoc


class FocusSessionRepository:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def create(self, session: FocusSessionDoc) -> ObjectId:
        result = self._col.insert_one(session.to_mongo())
        session.id = result.inserted_id
        return result.inserted_id

    def list_recent(self, user_id: Union[str, ObjectId], limit: int = 20) -> list[FocusSessionDoc]:
        cursor = (
            self._col.find({"user_id": to_object_id(user_id)})
            .sort("created_at", DESCENDING)
            .limit(limit)
        )
        return [FocusSessionDoc.from_mongo(doc) for doc in cursor]

    def count(self, user_id: Union[str, ObjectId]) -> int:
        return self._col.count_documents({"user_id": to_object_id(user_id)})
