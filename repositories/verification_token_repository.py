"""
Repository for the `verification-tokens` collection.

Thin pymongo wrapper: the OTP service owns every rule, this class only
knows how to find, write and delete single records.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection

from schemas.models.base import to_object_id
from schemas.models.token import PURPOSE_PASSWORD_RESET, VerificationTokenDoc


class VerificationTokenRepository:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def find(
        self, user_id: Union[str, ObjectId], purpose: str
    ) -> Optional[VerificationTokenDoc]:
        doc = self._col.find_one({"user_id": to_object_id(user_id), "purpose": purpose})
        return VerificationTokenDoc.from_mongo(doc)

    def find_by_reset_token(
        self, user_id: Union[str, ObjectId], reset_token_hash: str
    ) -> Optional[VerificationTokenDoc]:
        doc = self._col.find_one(
            {
                "user_id": to_object_id(user_id),
                "purpose": PURPOSE_PASSWORD_RESET,
                "reset_token_hash": reset_token_hash,
            }
        )
        return VerificationTokenDoc.from_mongo(doc)

    def create(self, token: VerificationTokenDoc) -> ObjectId:
        result = self._col.insert_one(token.to_mongo())
        token.id = result.inserted_id
        return result.inserted_id

    def update(self, token_id: ObjectId, fields: dict[str, Any]) -> None:
        self._col.update_one({"_id": token_id}, {"$set": fields})

    def increment_attempts(self, token_id: ObjectId) -> Optional[int]:
        """Atomically bump the attempts counter and return the new value.

        Returns None if the record vanished in the meantime.
        """
        doc = self._col.find_one_and_update(
            {"_id": token_id},
            {"$inc": {"attempts": 1}},
            projection={"attempts": 1},
            return_document=ReturnDocument.AFTER,
        )
        return None if doc is None else doc["attempts"]

    def delete(self, token_id: ObjectId) -> bool:
        return self._col.delete_one({"_id": token_id}).deleted_count == 1

    def delete_for_user(self, user_id: Union[str, ObjectId], purpose: str) -> int:
        result = self._col.delete_many({"user_id": to_object_id(user_id), "purpose": purpose})
        return result.deleted_count
