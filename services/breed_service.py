"""
Breed catalogue and the per-user breed collection.

Breeds unlock permanently once the user's all-time kibble reaches the
breed's requirement; spending kibble on treats never locks one again.
"""

from __future__ import annotations

from typing import Union

from bson import ObjectId

from errors import BreedLockedError, NotFoundError, ValidationError
from repositories.user_repository import UserRepository
from schemas.dto.responses.breeds import Breed, BreedCollection, BreedStatus, UnlockReport
from schemas.models.user import UserDoc
from services import stat_engine
from shared.logging import get_logger

log = get_logger(__name__)


BREEDS: tuple[Breed, ...] = (
    Breed(id="golden_retriever", name="Golden Retriever", description="Friendly & loyal companion", unlock_requirement=0, order=1),
    Breed(id="husky", name="Husky", description="Energetic & adventurous", unlock_requirement=100, order=2),
    Breed(id="shiba_inu", name="Shiba Inu", description="Charming & spirited", unlock_requirement=250, order=3),
    Breed(id="cavapoo", name="Cavapoo", description="Sweet & cuddly", unlock_requirement=500, order=4),
    Breed(id="french_bulldog", name="French Bulldog", description="Playful & affectionate", unlock_requirement=750, order=5),
    Breed(id="labrador", name="Labrador Retriever", description="Gentle & outgoing", unlock_requirement=1000, order=6),
    Breed(id="dachshund", name="Dachshund", description="Clever & curious", unlock_requirement=1500, order=7),
    Breed(id="australian_shepherd", name="Australian Shepherd", description="Smart & work-oriented", unlock_requirement=2000, order=8),
    Breed(id="maltese", name="Maltese", description="Gentle & fearless", unlock_requirement=3000, order=9),
)

BREED_UNLOCK_REQUIREMENTS: dict[str, int] = {b.id: b.unlock_requirement for b in BREEDS}

_BREEDS_BY_ID = {b.id: b for b in BREEDS}


def get_breed(breed_id: str) -> Breed:
    try:
        return _BREEDS_BY_ID[breed_id]
    except KeyError:
        raise NotFoundError("Breed not found", field="breed_id") from None


def breed_name(breed_id: str) -> str:
    """Display name for *breed_id*, "Buddy" for anything unknown."""
    breed = _BREEDS_BY_ID.get(breed_id)
    return breed.name if breed else "Buddy"


def unlock_progress(total_kibble: int, requirement: int) -> float:
    """Percent of the way to *requirement*, capped at 100."""
    if requirement <= 0:
        return 100.0
    return min(100.0, total_kibble / requirement * 100)


def breed_status(user: UserDoc) -> list[BreedStatus]:
    """Every breed with the user's unlock state, cheapest first."""
    statuses = [
        BreedStatus(
            **breed.model_dump(),
            unlocked=breed.id in user.unlocked_breeds,
            is_active=breed.id == user.active_breed,
            progress=unlock_progress(user.total_kibble, breed.unlock_requirement),
            kibble_to_unlock=max(0, breed.unlock_requirement - user.total_kibble),
        )
        for breed in BREEDS
    ]
    return sorted(statuses, key=lambda s: s.unlock_requirement)


class BreedService:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def _load(self, user_id: Union[str, ObjectId]) -> UserDoc:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_breeds(self, user_id: Union[str, ObjectId]) -> list[BreedStatus]:
        return breed_status(self._load(user_id))

    def collection_summary(self, user_id: Union[str, ObjectId]) -> BreedCollection:
        user = self._load(user_id)
        next_to_unlock = next(
            (
                b
                for b in BREEDS
                if b.id not in user.unlocked_breeds and b.unlock_requirement > user.total_kibble
            ),
            None,
        )
        return BreedCollection(
            unlocked_breeds=user.unlocked_breeds,
            active_breed=user.active_breed,
            total_kibble=user.total_kibble,
            unlocked_count=len(user.unlocked_breeds),
            total_breeds=len(BREEDS),
            next_to_unlock=next_to_unlock,
        )

    def get_active_breed(self, user_id: Union[str, ObjectId]) -> Breed:
        user = self._load(user_id)
        return _BREEDS_BY_ID.get(user.active_breed, BREEDS[0])

    def set_active_breed(self, user_id: Union[str, ObjectId], breed_id: str) -> Breed:
        if not breed_id:
            raise ValidationError("Breed ID is required", field="breed_id")
        breed = get_breed(breed_id)
        user = self._load(user_id)

        if breed_id not in user.unlocked_breeds:
            raise BreedLockedError(
                breed_id,
                requirement=breed.unlock_requirement,
                kibble_needed=max(0, breed.unlock_requirement - user.total_kibble),
            )

        self._users.update(user.id, {"active_breed": breed_id})
        log.info("active_breed_changed", user_id=str(user.id), breed_id=breed_id)
        return breed

    def check_unlocks(self, user_id: Union[str, ObjectId]) -> UnlockReport:
        user = self._load(user_id)
        newly_unlocked = stat_engine.check_unlocks(user, BREED_UNLOCK_REQUIREMENTS)
        if newly_unlocked:
            self._users.update(user.id, {"unlocked_breeds": user.unlocked_breeds})
            log.info("breeds_unlocked", user_id=str(user.id), breeds=newly_unlocked)
        return UnlockReport(
            newly_unlocked=newly_unlocked,
            unlocked_breeds=user.unlocked_breeds,
            total_kibble=user.total_kibble,
        )
