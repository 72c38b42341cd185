# inkwell/conftest.py
import os
from datetime import datetime, timedelta, timezone

import pytest

from inkwell.core.database import Database
from inkwell.models.story import StoryCategory, NewStory
from inkwell.models.user import UserIdentity
from inkwell.store import ContentStore


class FakeClock:
    """Deterministic clock: every reading is one second after the previous one."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture(scope="session")
def db_url():
    """
    Database URL for tests.

    TEST_DATABASE_URL points the suite at a real Postgres; otherwise each
    test gets its own in-memory SQLite database.
    """
    return os.getenv("TEST_DATABASE_URL") or "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db(db_url):
    """Fresh schema per test."""
    database = Database(db_url)
    database.reset()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture(scope="function")
def clock():
    return FakeClock()


@pytest.fixture(scope="function")
def store(db, clock):
    return ContentStore(db, clock=clock)


@pytest.fixture
def make_user(store):
    def _make(user_id: str, **fields):
        return store.upsert_user(UserIdentity(id=user_id, **fields))
    return _make


@pytest.fixture
def make_story(store):
    """Create a story, optionally published, for an existing author."""
    def _make(author_id: str, title: str = "A Story", *, category: StoryCategory = StoryCategory.STORY,
              content: str = "Once upon a time", published: bool = False, **fields):
        story = store.create_story(
            NewStory(title=title, content=content, category=category, author_id=author_id, **fields)
        )
        if published:
            story = store.publish_story(story.id)
        return story
    return _make


@pytest.fixture
def alice(make_user):
    return make_user("user-alice", email="alice@example.com", first_name="Alice", username="alice")


@pytest.fixture
def bob(make_user):
    return make_user("user-bob", email="bob@example.com", first_name="Bob", username="bob")
