"""
Result DTOs for the breed collection.

Breed              catalogue entry
BreedStatus        catalogue entry + per-user unlock progress
BreedCollection    BreedService.collection_summary()
UnlockReport       BreedService.check_unlocks()
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Breed(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    description: str
    unlock_requirement: int
    order: int


class BreedStatus(Breed):
    unlocked: bool
    is_active: bool
    progress: float  # percent, 0–100
    kibble_to_unlock: int


class BreedCollection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unlocked_breeds: list[str]
    active_breed: str
    total_kibble: int
    unlocked_count: int
    total_breeds: int
    next_to_unlock: Optional[Breed] = None


class UnlockReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    newly_unlocked: list[str]
    unlocked_breeds: list[str]
    total_kibble: int
