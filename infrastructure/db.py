"""
MongoDB collection names and index management.

The client itself is created by the hosting application; everything here
takes an already-connected pymongo Database.
"""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from repositories.daily_stats_repository import DailyStatsRepository
from repositories.focus_session_repository import FocusSessionRepository
from repositories.user_repository import UserRepository
from repositories.verification_token_repository import VerificationTokenRepository
from shared.logging import get_logger

log = get_logger(__name__)

USERS = "users"
VERIFICATION_TOKENS = "verification-tokens"
DAILY_STATS = "daily-stats"
FOCUS_SESSIONS = "focus-sessions"


class Repositories:
    """One repository per collection of *db*."""

    def __init__(self, db: Database) -> None:
        self.users = UserRepository(db[USERS])
        self.verification_tokens = VerificationTokenRepository(db[VERIFICATION_TOKENS])
        self.daily_stats = DailyStatsRepository(db[DAILY_STATS])
        self.focus_sessions = FocusSessionRepository(db[FOCUS_SESSIONS])


def ensure_indexes(db: Database) -> bool:
    """Create the indexes the repositories rely on.

    Returns False (after logging) when MongoDB refused; the app can still
    serve requests without them, only slower and without TTL reaping.
    """
    try:
        db[USERS].create_index([("email", ASCENDING)], unique=True)

        tokens = db[VERIFICATION_TOKENS]
        tokens.create_index([("user_id", ASCENDING), ("purpose", ASCENDING)])
        tokens.create_index([("email", ASCENDING), ("purpose", ASCENDING)])
        # TTL: MongoDB removes records once expires_at passes
        tokens.create_index([("expires_at", ASCENDING)], expireAfterSeconds=0)

        db[DAILY_STATS].create_index(
            [("user_id", ASCENDING), ("date", DESCENDING)], unique=True
        )
        db[FOCUS_SESSIONS].create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)]
        )
    except PyMongoError as e:
        log.error("ensure_indexes_failed", error=str(e), error_type=type(e).__name__)
        return False
    return True
