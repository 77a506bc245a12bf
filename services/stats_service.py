"""
Stats read model: today, week, month, all-time and the daily chart.

Reading stats is also where a lapsed streak gets noticed. A user who has
not completed a session since the day before yesterday has their current
streak zeroed and persisted here, not on the write path.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Union

from bson import ObjectId

from config import ProgressSettings
from errors import NotFoundError
from repositories.daily_stats_repository import DailyStatsRepository
from repositories.user_repository import UserRepository
from schemas.dto.responses.stats import ChartPoint, DailyTotals, PeriodStats, StatsSnapshot
from schemas.models.daily_stats import DailyStatsDoc
from services import stat_engine
from services.focus_service import progress_totals
from shared.datetime_utils import days_back, iso_day, to_calendar_date, utc_now
from shared.logging import get_logger

log = get_logger(__name__)

WEEK_DAYS = 7
MONTH_DAYS = 30
MAX_CHART_DAYS = 90

# Indexed by (weekday() + 1) % 7 so Sunday comes first
DAY_LABELS = "SMTWTFS"


class StatsService:
    def __init__(
        self,
        users: UserRepository,
        daily_stats: DailyStatsRepository,
        settings: Optional[ProgressSettings] = None,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._users = users
        self._daily_stats = daily_stats
        self._settings = settings or ProgressSettings()
        self._now = now

    def _period(self, rows: list[DailyStatsDoc]) -> PeriodStats:
        minutes = sum(r.focus_minutes for r in rows)
        kibble = sum(r.kibble_earned for r in rows)
        active_days = sum(1 for r in rows if r.focus_minutes > 0)
        return PeriodStats(
            focus_minutes=minutes,
            sessions_completed=sum(r.sessions_completed for r in rows),
            kibble_earned=kibble,
            meals_provided=kibble // self._settings.kibble_per_meal,
            active_days=active_days,
            average_minutes_per_day=round(minutes / active_days) if active_days else 0,
        )

    def _chart(self, rows: list[DailyStatsDoc], today: str, days: int) -> list[ChartPoint]:
        by_day = {r.date: r for r in rows}
        points = []
        for offset in range(days - 1, -1, -1):
            day = days_back(today, offset)
            row = by_day.get(day)
            weekday = to_calendar_date(day).weekday()
            points.append(
                ChartPoint(
                    label=DAY_LABELS[(weekday + 1) % 7],
                    date=day,
                    minutes=row.focus_minutes if row else 0,
                    sessions=row.sessions_completed if row else 0,
                    is_today=offset == 0,
                )
            )
        return points

    def get_stats(self, user_id: Union[str, ObjectId]) -> StatsSnapshot:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        today = iso_day(self._now())
        if stat_engine.invalidate_stale_streak(user, today):
            self._users.update(user.id, {"current_streak": 0})
            log.info(
                "streak_reset_on_read",
                user_id=str(user.id),
                last_session_date=user.last_session_date,
            )

        month_rows = self._daily_stats.find_range(user.id, days_back(today, MONTH_DAYS - 1), today)
        week_start = days_back(today, WEEK_DAYS - 1)
        week_rows = [r for r in month_rows if r.date >= week_start]
        today_row = next((r for r in month_rows if r.date == today), None)

        today_totals = DailyTotals()
        if today_row is not None:
            today_totals = DailyTotals(
                focus_minutes=today_row.focus_minutes,
                sessions_completed=today_row.sessions_completed,
                kibble_earned=today_row.kibble_earned,
                meals_provided=today_row.kibble_earned // self._settings.kibble_per_meal,
            )

        return StatsSnapshot(
            today=today_totals,
            week=self._period(week_rows),
            month=self._period(month_rows),
            all_time=progress_totals(user),
            chart=self._chart(week_rows, today, WEEK_DAYS),
        )

    def chart_data(self, user_id: Union[str, ObjectId], days: int = 30) -> list[ChartPoint]:
        days = max(1, min(days, MAX_CHART_DAYS))
        today = iso_day(self._now())
        rows = self._daily_stats.find_range(user_id, days_back(today, days - 1), today)
        return self._chart(rows, today, days)
