"""
Daily stats document model.

Maps to the `daily-stats` MongoDB collection: one document per
(user_id, date), incremented as sessions complete.
"""

from __future__ import annotations

from pydantic import Field

from schemas.models.base import MongoBaseModel, PyObjectId


class DailyStatsDoc(MongoBaseModel):
    """Document model for the `daily-stats` collection."""

    user_id: PyObjectId
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    focus_minutes: int = Field(default=0, ge=0)
    sessions_completed: int = Field(default=0, ge=0)
    kibble_earned: int = Field(default=0, ge=0)
