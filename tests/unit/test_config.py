"""Unit tests for AppSettings and sub-configs."""

from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    BuddySettings,
    DatabaseSettings,
    OtpSettings,
    ProgressSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "paws-focus"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# OtpSettings
# ---------------------------------------------------------------------------


class TestOtpSettings:
    def test_defaults(self):
        s = OtpSettings()
        assert s.otp_code_length == 6
        assert s.otp_max_resends == 3
        assert s.otp_max_attempts == 5
        assert s.code_ttl == timedelta(minutes=10)
        assert s.resend_window == timedelta(minutes=10)
        assert s.reset_token_ttl == timedelta(minutes=5)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("OTP_RESEND_WINDOW_SECONDS", "60")
        monkeypatch.setenv("OTP_MAX_RESENDS", "1")
        s = OtpSettings()
        assert s.resend_window == timedelta(seconds=60)
        assert s.otp_max_resends == 1

    @pytest.mark.parametrize("length", ["3", "11"])
    def test_code_length_bounds(self, monkeypatch, length):
        monkeypatch.setenv("OTP_CODE_LENGTH", length)
        with pytest.raises(PydanticValidationError):
            OtpSettings()


# ---------------------------------------------------------------------------
# BuddySettings / ProgressSettings
# ---------------------------------------------------------------------------


def test_buddy_defaults():
    s = BuddySettings()
    assert s.buddy_decay_per_hour == 2
    assert s.buddy_happiness_floor == 20
    assert s.buddy_fullness_floor == 10
    assert s.buddy_treat_cost == 10


def test_buddy_floor_out_of_range(monkeypatch):
    monkeypatch.setenv("BUDDY_FULLNESS_FLOOR", "150")
    with pytest.raises(PydanticValidationError):
        BuddySettings()


def test_progress_defaults():
    s = ProgressSettings()
    assert s.kibble_per_session == 10
    assert s.kibble_per_meal == 25
    assert s.session_end_tolerance_seconds == 60


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in ("db", "otp", "buddy", "progress", "logging"):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_sub_configs_read_same_environment(self, with_mongo):
        with_mongo.setenv("KIBBLE_PER_SESSION", "15")
        assert AppSettings().progress.kibble_per_session == 15

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            AppSettings()
