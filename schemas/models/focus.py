"""
Focus session document model.

Maps to the `focus-sessions` MongoDB collection. Failed sessions are stored
too; only completed ones move the user's progress.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from schemas.models.base import MongoBaseModel, PyObjectId
from shared.datetime_utils import OptionalUtcDatetime, UtcDatetime

SESSION_COMPLETED = "completed"
SESSION_FAILED = "failed"

SessionStatus = Literal["completed", "failed"]


class FocusSessionDoc(MongoBaseModel):
    """Document model for the `focus-sessions` collection."""

    user_id: PyObjectId
    start_time: UtcDatetime
    duration: int = Field(ge=1)  # minutes
    status: SessionStatus
    created_at: OptionalUtcDatetime = None
