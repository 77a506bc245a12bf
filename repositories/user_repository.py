"""Repository for the `users` collection (account + progress fields)."""

from __future__ import annotations

from typing import Any, Optional, Union

from bson import ObjectId
from pymongo.collection import Collection

from schemas.models.base import to_object_id
from schemas.models.user import PROGRESS_FIELDS, UserDoc
from shared.datetime_utils import utc_now


class UserRepository:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def find_by_id(self, user_id: Union[str, ObjectId]) -> Optional[UserDoc]:
        return UserDoc.from_mongo(self._col.find_one({"_id": to_object_id(user_id)}))

    def find_by_email(self, email: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(self._col.find_one({"email": email.strip().lower()}))

    def create(self, user: UserDoc) -> ObjectId:
        result = self._col.insert_one(user.to_mongo())
        user.id = result.inserted_id
        return result.inserted_id

    def update(self, user_id: Union[str, ObjectId], fields: dict[str, Any]) -> None:
        fields = {**fields, "updated_at": utc_now()}
        self._col.update_one({"_id": to_object_id(user_id)}, {"$set": fields})

    def save_progress(self, user: UserDoc) -> None:
        """Write back every progress field of *user* in a single $set."""
        data = user.model_dump(include=set(PROGRESS_FIELDS))
        self.update(user.id, data)
