"""Repository for the `daily-stats` collection."""

from __future__ import annotations

from typing import Optional, Union

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection

from schemas.models.base import to_object_id
from schemas.models.daily_stats import DailyStatsDoc


class DailyStatsRepository:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def find(self, user_id: Union[str, ObjectId], day: str) -> Optional[DailyStatsDoc]:
        doc = self._col.find_one({"user_id": to_object_id(user_id), "date": day})
        return DailyStatsDoc.from_mongo(doc)

    def increment(
        self,
        user_id: Union[str, ObjectId],
        day: str,
        *,
        focus_minutes: int,
        sessions_completed: int = 1,
        kibble_earned: int = 0,
    ) -> DailyStatsDoc:
        """Upsert the day's document and add to its counters atomically."""
        doc = self._col.find_one_and_update(
            {"user_id": to_object_id(user_id), "date": day},
            {
                "$inc": {
                    "focus_minutes": focus_minutes,
                    "sessions_completed": sessions_completed,
                    "kibble_earned": kibble_earned,
                }
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return DailyStatsDoc.from_mongo(doc)

    def find_range(
        self, user_id: Union[str, ObjectId], start_day: str, end_day: Optional[str] = None
    ) -> list[DailyStatsDoc]:
        """Documents with start_day <= date (<= end_day), oldest first."""
        date_filter: dict = {"$gte": start_day}
        if end_day is not None:
            date_filter["$lte"] = end_day
        cursor = self._col.find(
            {"user_id": to_object_id(user_id), "date": date_filter}
        ).sort("date", ASCENDING)
        return [DailyStatsDoc.from_mongo(doc) for doc in cursor]
