"""
Result DTOs for the virtual buddy.

BuddyDecay         stat_engine.decay_buddy_stats()
BuddyMood          mood derived from happiness/fullness
BuddySnapshot      BuddyService.get_buddy()
InteractionResult  BuddyService.interact() / feed()
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BuddyDecay(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    happiness: int
    fullness: int
    decay: int
    hours_since_interaction: float


class BuddyMood(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    state: str  # sleeping | happy | hungry | lonely | idle
    text: str
    emoji: str


class BuddySnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    happiness: int
    fullness: int
    last_interaction: datetime
    active_breed: str
    hours_since_interaction: float
    status: BuddyMood


class InteractionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str
    message: str
    kibble_spent: int
    happiness: int
    fullness: int
    kibble_balance: int
    status: Optional[BuddyMood] = None
