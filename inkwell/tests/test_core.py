"""
Ambient stack: logging, configuration, errors, the database handle and
startup wiring.
"""

import builtins
import json
import logging

import pytest
from sqlalchemy import inspect, insert, select

from inkwell.bootstrap import create_store
from inkwell.core.config import Settings, validate_config
from inkwell.core.database import Database, users
from inkwell.core.errors import (
    AppError,
    ConflictError,
    NotFoundError,
    PermissionError,
    ValidationError,
    error_payload,
)
from inkwell.core.logging import JsonFormatter, get_request_id, log_event, request_context
from inkwell.scripts import manage_db
from inkwell.store import ContentStore


# Logging

def test_request_context_binds_and_resets():
    assert get_request_id() is None
    with request_context("req-1") as rid:
        assert rid == "req-1"
        assert get_request_id() == "req-1"
    assert get_request_id() is None

    with request_context() as generated:
        assert generated


def test_json_formatter_includes_structured_fields():
    record = logging.LogRecord("inkwell", logging.INFO, __file__, 1, "like.toggled", None, None)
    record.request_id = "req-9"
    record.user_id = "user-bob"
    record.story_id = "story-1"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "like.toggled"
    assert payload["request_id"] == "req-9"
    assert payload["user_id"] == "user-bob"
    assert payload["story_id"] == "story-1"
    assert "error_code" not in payload


def test_log_event_carries_request_id(caplog):
    caplog.set_level(logging.INFO, logger="inkwell")

    with request_context("req-42"):
        log_event("info", "story.published", story_id="s1", extra={"body": "x" * 600})

    record = next(r for r in caplog.records if r.getMessage() == "story.published")
    assert record.request_id == "req-42"
    assert record.story_id == "s1"
    assert record.body.endswith("...<truncated>")


def test_store_operations_log_events(store, alice, bob, make_story, caplog):
    caplog.set_level(logging.INFO, logger="inkwell")
    story = make_story(alice.id, published=True)

    store.toggle_like(bob.id, story.id)

    messages = [r.getMessage() for r in caplog.records]
    assert "story.published" in messages
    assert "like.toggled" in messages


# Configuration

def test_validate_config_warns_when_not_strict(caplog):
    cfg = Settings(DATABASE_URL=None, _env_file=None)

    with caplog.at_level(logging.WARNING, logger="inkwell"):
        assert validate_config(strict=False, settings_obj=cfg) is True

    assert "DATABASE_URL" in caplog.text


def test_validate_config_raises_when_strict():
    cfg = Settings(DATABASE_URL=None, _env_file=None)

    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        validate_config(strict=True, settings_obj=cfg)


def test_settings_defaults():
    cfg = Settings(_env_file=None)

    assert cfg.FEED_LIMIT == 50
    assert cfg.NOTIFICATION_LIMIT == 20


# Errors

@pytest.mark.parametrize(
    "exc_class,status,code",
    [
        (ValidationError, 400, "validation_error"),
        (PermissionError, 403, "forbidden"),
        (NotFoundError, 404, "not_found"),
        (ConflictError, 409, "conflict"),
        (AppError, 500, "app_error"),
    ],
)
def test_error_status_codes(exc_class, status, code):
    exc = exc_class("boom")

    assert exc.status_code == status
    assert exc.code == code


def test_error_payload_uses_bound_request_id():
    with request_context("req-7"):
        payload = error_payload(NotFoundError("Story s1 not found"))

    assert payload == {
        "error": {"code": "not_found", "message": "Story s1 not found", "request_id": "req-7"},
        "detail": "Story s1 not found",
    }


def test_app_errors_keep_builtin_bases():
    assert isinstance(PermissionError("no"), builtins.PermissionError)
    assert isinstance(ValidationError("bad"), ValueError)


# Database

def test_database_requires_url():
    with pytest.raises(ValueError):
        Database("")


def test_schema_has_natural_key_constraints(db):
    inspector = inspect(db.engine)
    tables = set(inspector.get_table_names())

    assert {"users", "stories", "chapters", "drafts", "likes", "notifications",
            "highlights", "bookmarks", "quotes"} <= tables
    like_keys = [c["column_names"] for c in inspector.get_unique_constraints("likes")]
    bookmark_keys = [c["column_names"] for c in inspector.get_unique_constraints("bookmarks")]
    assert ["user_id", "story_id"] in like_keys
    assert ["user_id", "story_id"] in bookmark_keys


def test_session_rolls_back_on_error(db, clock):
    now = clock()
    with pytest.raises(RuntimeError):
        with db.session() as session:
            session.execute(insert(users).values(id="u1", created_at=now, updated_at=now))
            raise RuntimeError("abort")

    with db.session() as session:
        assert session.execute(select(users.c.id)).first() is None


def test_check_connection(db):
    assert db.check_connection() is True


# Startup

def test_create_store_from_settings():
    cfg = Settings(DATABASE_URL="sqlite:///:memory:", FEED_LIMIT=5, _env_file=None)

    store = create_store(cfg)

    assert isinstance(store, ContentStore)
    assert store.feed_limit == 5
    assert store.db.dialect == "sqlite"
    assert store.get_published_stories() == []
    store.db.dispose()


def test_manage_db_commands(capsys):
    url = "sqlite:///:memory:"

    assert manage_db.main(["create", "--database-url", url]) == 0
    assert manage_db.main(["check", "--database-url", url]) == 0
    assert manage_db.main(["reset", "--database-url", url]) == 2
    assert "--yes" in capsys.readouterr().out
