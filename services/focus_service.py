"""
Focus session recording.

A completed session pays out kibble, extends the streak, may unlock breeds
and bumps today's daily stats. A failed session is only stored.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Union

from bson import ObjectId

from config import ProgressSettings
from errors import NotFoundError, ValidationError
from repositories.daily_stats_repository import DailyStatsRepository
from repositories.focus_session_repository import FocusSessionRepository
from repositories.user_repository import UserRepository
from schemas.dto.responses.stats import (
    DailyTotals,
    ProgressTotals,
    SessionHistory,
    SessionOutcome,
)
from schemas.models.focus import SESSION_COMPLETED, SESSION_FAILED, FocusSessionDoc
from schemas.models.user import UserDoc
from services import stat_engine
from services.breed_service import BREED_UNLOCK_REQUIREMENTS
from shared.datetime_utils import iso_day, parse_datetime, utc_now
from shared.logging import get_logger

log = get_logger(__name__)

MAX_HISTORY_LIMIT = 100


def progress_totals(user: UserDoc) -> ProgressTotals:
    return ProgressTotals(
        total_kibble=user.total_kibble,
        total_focus_minutes=user.total_focus_minutes,
        completed_sessions=user.completed_sessions,
        total_meals_provided=user.total_meals_provided,
        current_streak=user.current_streak,
        longest_streak=user.longest_streak,
        last_session_date=user.last_session_date,
    )


class FocusService:
    def __init__(
        self,
        users: UserRepository,
        sessions: FocusSessionRepository,
        daily_stats: DailyStatsRepository,
        settings: Optional[ProgressSettings] = None,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._daily_stats = daily_stats
        self._settings = settings or ProgressSettings()
        self._now = now

    def _validate(self, start_time: Any, duration: int, status: str, now: datetime) -> datetime:
        if status not in (SESSION_COMPLETED, SESSION_FAILED):
            raise ValidationError('Status must be either "completed" or "failed"', field="status")
        if not isinstance(duration, int) or duration < 1:
            raise ValidationError("Duration must be at least 1 minute", field="duration")

        started = parse_datetime(start_time)
        if started is None:
            raise ValidationError("startTime must be an ISO 8601 timestamp", field="start_time")
        if started > now:
            raise ValidationError("Start time cannot be in the future", field="start_time")

        tolerance = timedelta(seconds=self._settings.session_end_tolerance_seconds)
        if started + timedelta(minutes=duration) > now + tolerance:
            raise ValidationError("Session end time exceeds current server time", field="duration")
        return started

    def record_session(
        self,
        user_id: Union[str, ObjectId],
        start_time: Any,
        duration: int,
        status: str,
    ) -> SessionOutcome:
        now = self._now()
        started = self._validate(start_time, duration, status, now)

        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        session = FocusSessionDoc(
            user_id=user.id,
            start_time=started,
            duration=duration,
            status=status,
            created_at=now,
        )
        self._sessions.create(session)

        if status == SESSION_FAILED:
            log.info("focus_session_failed", user_id=str(user.id), duration=duration)
            return SessionOutcome(session=session, kibble_awarded=0)

        settings = self._settings
        kibble = settings.kibble_per_session
        today = iso_day(now)

        user.total_kibble += kibble
        user.total_focus_minutes += duration
        user.completed_sessions += 1
        user.total_meals_provided = user.total_kibble // settings.kibble_per_meal
        stat_engine.update_streak(user, today)
        newly_unlocked = stat_engine.check_unlocks(user, BREED_UNLOCK_REQUIREMENTS)
        self._users.save_progress(user)

        daily = self._daily_stats.increment(
            user.id, today, focus_minutes=duration, kibble_earned=kibble
        )

        log.info(
            "focus_session_completed",
            user_id=str(user.id),
            duration=duration,
            kibble_awarded=kibble,
            current_streak=user.current_streak,
            newly_unlocked=newly_unlocked,
        )

        return SessionOutcome(
            session=session,
            kibble_awarded=kibble,
            totals=progress_totals(user),
            newly_unlocked_breeds=newly_unlocked,
            daily=DailyTotals(
                focus_minutes=daily.focus_minutes,
                sessions_completed=daily.sessions_completed,
                kibble_earned=daily.kibble_earned,
                meals_provided=daily.kibble_earned // settings.kibble_per_meal,
            ),
        )

    def history(self, user_id: Union[str, ObjectId], limit: int = 20) -> SessionHistory:
        limit = max(1, min(limit, MAX_HISTORY_LIMIT))
        return SessionHistory(
            sessions=self._sessions.list_recent(user_id, limit),
            total=self._sessions.count(user_id),
        )
