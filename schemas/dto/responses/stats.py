"""
Result DTOs for focus sessions and stats.

ProgressTotals   all-time counters on the user
DailyTotals      one day's counters
SessionOutcome   FocusService.record_session()
SessionHistory   FocusService.history()
PeriodStats      week / month aggregates
ChartPoint       one bar in the daily chart
StatsSnapshot    StatsService.get_stats()
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.focus import FocusSessionDoc


class ProgressTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_kibble: int
    total_focus_minutes: int
    completed_sessions: int
    total_meals_provided: int
    current_streak: int
    longest_streak: int
    last_session_date: Optional[str] = None


class DailyTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    focus_minutes: int = 0
    sessions_completed: int = 0
    kibble_earned: int = 0
    meals_provided: int = 0


class SessionOutcome(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    session: FocusSessionDoc
    kibble_awarded: int
    totals: Optional[ProgressTotals] = None  # None for failed sessions
    newly_unlocked_breeds: list[str] = []
    daily: Optional[DailyTotals] = None


class SessionHistory(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    sessions: list[FocusSessionDoc]
    total: int


class PeriodStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    focus_minutes: int
    sessions_completed: int
    kibble_earned: int
    meals_provided: int
    active_days: int
    average_minutes_per_day: int


class ChartPoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label: str  # single-letter weekday, Sunday first
    date: str
    minutes: int
    sessions: int
    is_today: bool


class StatsSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    today: DailyTotals
    week: PeriodStats
    month: PeriodStats
    all_time: ProgressTotals
    chart: list[ChartPoint]
