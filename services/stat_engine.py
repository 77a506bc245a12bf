"""
Time-based progress rules: streaks, buddy decay and breed unlocks.

Pure functions over a UserDoc. The current time is always passed in by the
caller, nothing here reads a clock or touches the database; the services
load the user, call these, and persist the result.

Day arithmetic works on UTC calendar days (YYYY-MM-DD) with no timezone
normalisation beyond that, so a user near midnight in a far-off timezone
can see a streak day land on the "wrong" date.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Mapping, Optional, Union

from config import BuddySettings
from schemas.dto.responses.buddy import BuddyDecay
from schemas.models.user import UserDoc
from shared.datetime_utils import day_diff, ensure_utc, iso_day, utc_now

SECONDS_PER_HOUR = 3600


def update_streak(user: UserDoc, session_date: Optional[Union[str, date]] = None) -> UserDoc:
    """Advance the streak for a completed session on *session_date*.

    Same day leaves the streak alone, the next day extends it, any other
    gap (including a date before the last session) starts over at 1.
    """
    day = iso_day(session_date) if session_date is not None else iso_day(utc_now())

    if user.last_session_date is None:
        user.current_streak = 1
    else:
        diff_days = day_diff(day, user.last_session_date)
        if diff_days == 0:
            pass
        elif diff_days == 1:
            user.current_streak += 1
        else:
            user.current_streak = 1

    user.longest_streak = max(user.longest_streak, user.current_streak)
    user.last_session_date = day
    return user


def invalidate_stale_streak(user: UserDoc, today: Union[str, date]) -> bool:
    """Zero the streak when more than one day passed since the last session.

    Returns True when the streak changed and needs persisting.
    """
    if user.last_session_date is None:
        return False
    if day_diff(today, user.last_session_date) <= 1:
        return False
    if user.current_streak == 0:
        return False
    user.current_streak = 0
    return True


def _decayed(value: int, decay: int, floor: int) -> int:
    return max(floor, value - decay)


def decay_buddy_stats(
    user: UserDoc, now: datetime, settings: Optional[BuddySettings] = None
) -> BuddyDecay:
    """Compute the buddy's stats after the idle time since the last interaction.

    Decay is measured from last_buddy_interaction, which only a real
    interaction moves, so the user is not mutated and calling this twice
    in a row gives the same answer.
    """
    settings = settings or BuddySettings()
    elapsed = ensure_utc(now) - user.last_buddy_interaction
    hours_since = elapsed.total_seconds() / SECONDS_PER_HOUR
    decay = max(0, math.floor(hours_since * settings.buddy_decay_per_hour))

    happiness = user.buddy_happiness
    fullness = user.buddy_fullness
    if decay > 0:
        happiness = _decayed(happiness, decay, settings.buddy_happiness_floor)
        fullness = _decayed(fullness, decay, settings.buddy_fullness_floor)

    return BuddyDecay(
        happiness=happiness,
        fullness=fullness,
        decay=decay,
        hours_since_interaction=hours_since,
    )


def apply_buddy_decay(
    user: UserDoc, now: datetime, settings: Optional[BuddySettings] = None
) -> BuddyDecay:
    """Write the decayed stats onto *user*.

    Only call this right before an interaction that also moves
    last_buddy_interaction, otherwise the same idle hours decay twice.
    """
    result = decay_buddy_stats(user, now, settings)
    user.buddy_happiness = result.happiness
    user.buddy_fullness = result.fullness
    return result


def check_unlocks(user: UserDoc, thresholds: Mapping[str, int]) -> list[str]:
    """Unlock every breed whose kibble threshold the user has reached.

    Newly unlocked breed ids are appended to user.unlocked_breeds and
    returned ordered by threshold ascending.
    """
    ordered = sorted(thresholds.items(), key=lambda item: item[1])
    newly_unlocked = [
        breed_id
        for breed_id, threshold in ordered
        if user.total_kibble >= threshold and breed_id not in user.unlocked_breeds
    ]
    if newly_unlocked:
        user.unlocked_breeds = [*user.unlocked_breeds, *newly_unlocked]
    return newly_unlocked
