from datetime import timedelta

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, OperationFailure

from infrastructure.db import (
    DAILY_STATS,
    USERS,
    VERIFICATION_TOKENS,
    ensure_indexes,
)
from schemas.models.token import PURPOSE_EMAIL_VERIFY, PURPOSE_PASSWORD_RESET, VerificationTokenDoc
from schemas.models.user import UserDoc


def _token(user_id, clock, purpose=PURPOSE_EMAIL_VERIFY, **overrides):
    fields = {
        "user_id": user_id,
        "email": "walker@example.com",
        "purpose": purpose,
        "code_hash": "abc",
        "last_resend_at": clock(),
        "expires_at": clock() + timedelta(minutes=10),
    }
    fields.update(overrides)
    return VerificationTokenDoc(**fields)


class TestEnsureIndexes:
    def test_creates_indexes(self, mock_db):
        assert ensure_indexes(mock_db) is True

        token_indexes = mock_db[VERIFICATION_TOKENS].index_information()
        ttl = [i for i in token_indexes.values() if "expireAfterSeconds" in i]
        assert len(ttl) == 1
        assert ttl[0]["key"] == [("expires_at", 1)]

    def test_user_email_is_unique(self, mock_db):
        ensure_indexes(mock_db)
        mock_db[USERS].insert_one({"email": "a@b.co"})
        with pytest.raises(DuplicateKeyError):
            mock_db[USERS].insert_one({"email": "a@b.co"})

    def test_one_daily_document_per_user_and_day(self, mock_db):
        ensure_indexes(mock_db)
        user_id = ObjectId()
        mock_db[DAILY_STATS].insert_one({"user_id": user_id, "date": "2024-01-10"})
        with pytest.raises(DuplicateKeyError):
            mock_db[DAILY_STATS].insert_one({"user_id": user_id, "date": "2024-01-10"})

    def test_failure_is_reported(self, mock_db, monkeypatch):
        def refuse(*args, **kwargs):
            raise OperationFailure("not authorized")

        monkeypatch.setattr(type(mock_db[USERS]), "create_index", refuse)
        assert ensure_indexes(mock_db) is False


class TestVerificationTokenRepository:
    def test_find_by_pair(self, repos, clock):
        user_id = ObjectId()
        repos.verification_tokens.create(_token(user_id, clock))
        repos.verification_tokens.create(_token(user_id, clock, PURPOSE_PASSWORD_RESET))

        found = repos.verification_tokens.find(str(user_id), PURPOSE_PASSWORD_RESET)
        assert found.purpose == PURPOSE_PASSWORD_RESET
        assert found.expires_at == clock() + timedelta(minutes=10)

    def test_increment_attempts(self, repos, clock):
        token = _token(ObjectId(), clock)
        repos.verification_tokens.create(token)

        assert repos.verification_tokens.increment_attempts(token.id) == 1
        assert repos.verification_tokens.increment_attempts(token.id) == 2

        repos.verification_tokens.delete(token.id)
        assert repos.verification_tokens.increment_attempts(token.id) is None

    def test_find_by_reset_token(self, repos, clock):
        user_id = ObjectId()
        repos.verification_tokens.create(
            _token(user_id, clock, PURPOSE_PASSWORD_RESET, reset_token_hash="h1")
        )
        assert repos.verification_tokens.find_by_reset_token(user_id, "h1") is not None
        assert repos.verification_tokens.find_by_reset_token(user_id, "h2") is None
        assert repos.verification_tokens.find_by_reset_token(ObjectId(), "h1") is None

    def test_delete_for_user(self, repos, clock):
        user_id = ObjectId()
        repos.verification_tokens.create(_token(user_id, clock))
        repos.verification_tokens.create(_token(ObjectId(), clock))
        assert repos.verification_tokens.delete_for_user(user_id, PURPOSE_EMAIL_VERIFY) == 1


class TestUserRepository:
    def test_find_by_email_is_case_insensitive(self, repos):
        user = UserDoc(email="walker@example.com")
        repos.users.create(user)
        assert repos.users.find_by_email("  Walker@Example.COM ").id == user.id

    def test_save_progress_leaves_other_fields(self, repos, mock_db):
        user = UserDoc(email="walker@example.com", password_hash="h")
        repos.users.create(user)
        mock_db[USERS].update_one({"_id": user.id}, {"$set": {"pfp": "cat.png"}})

        user.total_kibble = 70
        user.unlocked_breeds = ["golden_retriever", "husky"]
        repos.users.save_progress(user)

        raw = mock_db[USERS].find_one({"_id": user.id})
        assert raw["total_kibble"] == 70
        assert raw["unlocked_breeds"] == ["golden_retriever", "husky"]
        assert raw["pfp"] == "cat.png"
        assert raw["password_hash"] == "h"
        assert raw["updated_at"] is not None


class TestDailyStatsRepository:
    def test_increment_upserts_then_adds(self, repos):
        user_id = ObjectId()
        first = repos.daily_stats.increment(user_id, "2024-01-10", focus_minutes=25, kibble_earned=10)
        assert first.focus_minutes == 25
        assert first.sessions_completed == 1

        second = repos.daily_stats.increment(user_id, "2024-01-10", focus_minutes=5, kibble_earned=10)
        assert second.focus_minutes == 30
        assert second.sessions_completed == 2
        assert second.kibble_earned == 20

    def test_find_range_is_ordered_and_bounded(self, repos):
        user_id = ObjectId()
        for day in ["2024-01-09", "2024-01-01", "2024-01-05", "2024-01-12"]:
            repos.daily_stats.increment(user_id, day, focus_minutes=10)

        rows = repos.daily_stats.find_range(user_id, "2024-01-02", "2024-01-10")
        assert [r.date for r in rows] == ["2024-01-05", "2024-01-09"]
        assert len(repos.daily_stats.find_range(user_id, "2024-01-02")) == 3
