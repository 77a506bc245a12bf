"""
Virtual buddy: mood, interactions and feeding.

Reads never persist decay; the stored happiness/fullness are the values as
of last_buddy_interaction and the decayed view is recomputed on every read.
An interaction first folds the decay into the stored values, applies its
own effect and then moves last_buddy_interaction to now.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Union

from bson import ObjectId

from config import BuddySettings
from errors import InsufficientKibbleError, NotFoundError, ValidationError
from repositories.user_repository import UserRepository
from schemas.dto.responses.buddy import BuddyMood, BuddySnapshot, InteractionResult
from schemas.models.user import UserDoc
from services import stat_engine
from services.breed_service import breed_name
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)

MAX_STAT = 100

ACTIONS = ("pet", "play", "treat")


def buddy_mood(happiness: int, fullness: int) -> BuddyMood:
    """Pick the mood shown for the given stats; hunger wins over happiness."""
    if fullness < 30:
        return BuddyMood(state="sleeping", text="Sleepy & hungry...", emoji="💤")
    if happiness >= 90:
        return BuddyMood(state="happy", text="Super happy!", emoji="🎉")
    if fullness < 50:
        return BuddyMood(state="hungry", text="Getting hungry...", emoji="🥺")
    if happiness < 50:
        return BuddyMood(state="lonely", text="Needs some attention", emoji="🐕")
    return BuddyMood(state="idle", text="Happy & content", emoji="😊")


def _capped(value: int) -> int:
    return min(MAX_STAT, value)


class BuddyService:
    def __init__(
        self,
        users: UserRepository,
        settings: Optional[BuddySettings] = None,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._users = users
        self._settings = settings or BuddySettings()
        self._now = now

    def _load(self, user_id: Union[str, ObjectId]) -> UserDoc:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_buddy(self, user_id: Union[str, ObjectId]) -> BuddySnapshot:
        user = self._load(user_id)
        decayed = stat_engine.decay_buddy_stats(user, self._now(), self._settings)
        return BuddySnapshot(
            happiness=decayed.happiness,
            fullness=decayed.fullness,
            last_interaction=user.last_buddy_interaction,
            active_breed=user.active_breed,
            hours_since_interaction=decayed.hours_since_interaction,
            status=buddy_mood(decayed.happiness, decayed.fullness),
        )

    def _commit_interaction(self, user: UserDoc, now: datetime) -> None:
        user.last_buddy_interaction = now
        self._users.update(
            user.id,
            {
                "buddy_happiness": user.buddy_happiness,
                "buddy_fullness": user.buddy_fullness,
                "total_kibble": user.total_kibble,
                "last_buddy_interaction": now,
            },
        )

    def interact(self, user_id: Union[str, ObjectId], action: str) -> InteractionResult:
        """Pet, play with or give a treat to the buddy."""
        if action not in ACTIONS:
            raise ValidationError("Invalid action. Use: pet, play, or treat", field="action")

        user = self._load(user_id)
        now = self._now()
        stat_engine.apply_buddy_decay(user, now, self._settings)

        name = breed_name(user.active_breed)
        kibble_spent = 0
        if action == "pet":
            user.buddy_happiness = _capped(user.buddy_happiness + 5)
            message = f"{name} loves the pets!"
        elif action == "play":
            user.buddy_happiness = _capped(user.buddy_happiness + 10)
            user.buddy_fullness = max(0, user.buddy_fullness - 5)
            message = f"{name} had a blast playing!"
        else:
            cost = self._settings.buddy_treat_cost
            if user.total_kibble < cost:
                raise InsufficientKibbleError(required=cost, available=user.total_kibble)
            user.total_kibble -= cost
            user.buddy_fullness = _capped(user.buddy_fullness + 20)
            user.buddy_happiness = _capped(user.buddy_happiness + 5)
            kibble_spent = cost
            message = f"{name} gobbled up the treat!"

        self._commit_interaction(user, now)
        log.info("buddy_interaction", user_id=str(user.id), action=action, kibble_spent=kibble_spent)

        return InteractionResult(
            action=action,
            message=message,
            kibble_spent=kibble_spent,
            happiness=user.buddy_happiness,
            fullness=user.buddy_fullness,
            kibble_balance=user.total_kibble,
            status=buddy_mood(user.buddy_happiness, user.buddy_fullness),
        )

    def feed(self, user_id: Union[str, ObjectId], amount: int = 10) -> InteractionResult:
        """Spend *amount* kibble: fullness +2 per kibble, happiness +1 per two."""
        if amount < 1:
            raise ValidationError("Amount must be at least 1", field="amount")

        user = self._load(user_id)
        if user.total_kibble < amount:
            raise InsufficientKibbleError(required=amount, available=user.total_kibble)

        now = self._now()
        stat_engine.apply_buddy_decay(user, now, self._settings)
        user.total_kibble -= amount
        user.buddy_fullness = _capped(user.buddy_fullness + amount * 2)
        user.buddy_happiness = _capped(user.buddy_happiness + amount // 2)

        self._commit_interaction(user, now)
        log.info("buddy_fed", user_id=str(user.id), amount=amount)

        return InteractionResult(
            action="feed",
            message=f"{breed_name(user.active_breed)} enjoyed the meal!",
            kibble_spent=amount,
            happiness=user.buddy_happiness,
            fullness=user.buddy_fullness,
            kibble_balance=user.total_kibble,
            status=buddy_mood(user.buddy_happiness, user.buddy_fullness),
        )
