"""
User document model.

Maps to the `users` MongoDB collection.

Only the account fields the verification flow touches and the progress
fields (kibble, streaks, breeds, buddy stats) are modelled here; profile
and social-login fields are left to the collaborators that own them and
survive untouched because updates use $set on named fields.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel
from shared.datetime_utils import OptionalUtcDatetime, UtcDatetime, utc_now

DEFAULT_BREED = "golden_retriever"

# Fields written back by UserRepository.save_progress()
PROGRESS_FIELDS = (
    "total_kibble",
    "total_focus_minutes",
    "completed_sessions",
    "total_meals_provided",
    "current_streak",
    "longest_streak",
    "last_session_date",
    "unlocked_breeds",
    "active_breed",
    "buddy_happiness",
    "buddy_fullness",
    "last_buddy_interaction",
)


class UserDoc(MongoBaseModel):
    """
    Document model for the `users` collection.

    last_session_date is a UTC calendar day string (YYYY-MM-DD) or None
    before the first completed session.
    """

    email: str
    email_verified: bool = False
    user_name: Optional[str] = None
    password_hash: Optional[str] = None

    total_kibble: int = Field(default=0, ge=0)
    total_focus_minutes: int = Field(default=0, ge=0)
    completed_sessions: int = Field(default=0, ge=0)
    total_meals_provided: int = Field(default=0, ge=0)

    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_session_date: Optional[str] = Field(
        default=None, pattern=r"^\d{4}-\d{2}-\d{2}$"
    )

    unlocked_breeds: list[str] = Field(default_factory=lambda: [DEFAULT_BREED])
    active_breed: str = DEFAULT_BREED

    buddy_happiness: int = Field(default=100, ge=0, le=100)
    buddy_fullness: int = Field(default=100, ge=0, le=100)
    last_buddy_interaction: UtcDatetime = Field(default_factory=utc_now)

    created_at: OptionalUtcDatetime = None
    updated_at: OptionalUtcDatetime = None
