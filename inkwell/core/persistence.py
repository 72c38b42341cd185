"""
Shared plumbing for the per-entity persistence classes.

Every persistence class receives the Database handle at construction time;
ContentStore composes them into a single object.
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Any
from uuid import uuid4

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite

from inkwell.core.config import settings
from inkwell.core.database import Database


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def labeled_columns(table: Table, prefix: str) -> List:
    """Columns of `table` labeled `<prefix><name>` for flattened joins."""
    return [column.label(f"{prefix}{column.name}") for column in table.c]


def unlabel(mapping, table: Table, prefix: str = "") -> Dict[str, Any]:
    """Pull one table's fields back out of a flattened row mapping."""
    return {column.name: mapping[f"{prefix}{column.name}"] for column in table.c}


class Persistence:
    """Base for persistence classes: handle, clock, id generation, caps."""

    def __init__(
        self,
        db: Database,
        *,
        clock: Optional[Clock] = None,
        feed_limit: Optional[int] = None,
        notification_limit: Optional[int] = None,
    ):
        self.db = db
        self._clock = clock or utcnow
        self.feed_limit = feed_limit if feed_limit is not None else settings.FEED_LIMIT
        self.notification_limit = (
            notification_limit if notification_limit is not None else settings.NOTIFICATION_LIMIT
        )

    def _now(self) -> datetime:
        return self._clock()

    @staticmethod
    def _new_id() -> str:
        return str(uuid4())

    def _upsert(self, table: Table):
        """Dialect insert construct that supports ON CONFLICT clauses."""
        dialect = self.db.dialect
        if dialect == "postgresql":
            return postgresql.insert(table)
        if dialect == "sqlite":
            return sqlite.insert(table)
        raise NotImplementedError(f"ON CONFLICT upserts are not supported on {dialect}")
