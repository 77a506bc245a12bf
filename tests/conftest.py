from datetime import datetime, timedelta, timezone

import mongomock
import pytest

from config import BuddySettings, OtpSettings, ProgressSettings
from infrastructure.db import Repositories
from schemas.models.user import UserDoc


class FrozenClock:
    """Callable clock for services; tests move it forward explicitly."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def mock_db():
    # Create a mock database
    mock_db = mongomock.MongoClient().db
    return mock_db


@pytest.fixture
def repos(mock_db):
    return Repositories(mock_db)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def otp_settings():
    return OtpSettings()


@pytest.fixture
def buddy_settings():
    return BuddySettings()


@pytest.fixture
def progress_settings():
    return ProgressSettings()


@pytest.fixture
def make_user(repos, clock):
    """Insert a user and return it reloaded from the collection."""

    def _make(**overrides) -> UserDoc:
        fields = {
            "email": "walker@example.com",
            "user_name": "Walker",
            "last_buddy_interaction": clock(),
        }
        fields.update(overrides)
        user = UserDoc(**fields)
        repos.users.create(user)
        return repos.users.find_by_id(user.id)

    return _make
