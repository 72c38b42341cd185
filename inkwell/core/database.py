"""
Database configuration and connection management.

This module provides:
- SQLAlchemy Core table definitions for every persisted entity
- An explicitly constructed Database handle (engine + session factory)
- Connection pooling with sane defaults
- SQLite support for tests and local development
"""
from typing import Optional, Iterator
from contextlib import contextmanager
import logging

from sqlalchemy import (
    create_engine,
    event,
    MetaData,
    Table,
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    JSON,
    Text,
    Index,
    ForeignKey,
    UniqueConstraint,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.sql import func

from inkwell.core.config import settings, Settings


logger = logging.getLogger("inkwell")

# SQLAlchemy metadata for table definitions
metadata = MetaData()


users = Table(
    'users',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('email', String(320), unique=True, nullable=True),
    Column('first_name', String(200), nullable=True),
    Column('last_name', String(200), nullable=True),
    Column('profile_image_url', Text, nullable=True),
    Column('bio', Text, nullable=True),
    Column('username', String(100), unique=True, nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
)

stories = Table(
    'stories',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('title', String(500), nullable=False),
    Column('content', Text, nullable=False),
    Column('excerpt', Text, nullable=True),
    Column('category', String(50), nullable=False),  # 'story', 'poem', 'fanfiction'
    Column('cover_image_url', Text, nullable=True),
    Column('author_id', String(100), ForeignKey('users.id'), nullable=False, index=True),
    Column('published', Boolean, nullable=False, server_default='false'),
    Column('published_at', DateTime(timezone=True), nullable=True),
    Column('word_count', Integer, nullable=False, server_default='0'),
    Column('has_chapters', Boolean, nullable=False, server_default='false'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Feed pattern: published stories filtered by category, newest first
    Index('idx_stories_published_category', 'published', 'category', 'published_at'),
    Index('idx_stories_author_published', 'author_id', 'published_at'),
)

# chapter_number is expected to be unique per story but is not constrained
chapters = Table(
    'chapters',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('story_id', String(100), ForeignKey('stories.id'), nullable=False),
    Column('title', String(500), nullable=False),
    Column('content', Text, nullable=False),
    Column('chapter_number', Integer, nullable=False),
    Column('published', Boolean, nullable=False, server_default='false'),
    Column('published_at', DateTime(timezone=True), nullable=True),
    Column('word_count', Integer, nullable=False, server_default='0'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_chapters_story_number', 'story_id', 'chapter_number'),
)

drafts = Table(
    'drafts',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('title', String(500), nullable=True),
    Column('content', Text, nullable=True),
    Column('category', String(50), nullable=True),
    Column('cover_image_url', Text, nullable=True),
    Column('author_id', String(100), ForeignKey('users.id'), nullable=False),
    Column('character_data', JSON, nullable=True),
    Column('outline', Text, nullable=True),
    Column('word_count', Integer, nullable=False, server_default='0'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # get_drafts_by_author pattern: (author_id, updated_at)
    Index('idx_drafts_author_updated', 'author_id', 'updated_at'),
)

likes = Table(
    'likes',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('user_id', String(100), ForeignKey('users.id'), nullable=False, index=True),
    Column('story_id', String(100), ForeignKey('stories.id'), nullable=False, index=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # One like per (user_id, story_id); toggle_like relies on it
    UniqueConstraint('user_id', 'story_id', name='uq_likes_user_story'),
)

notifications = Table(
    'notifications',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('user_id', String(100), ForeignKey('users.id'), nullable=False),
    Column('type', String(50), nullable=False),  # 'like'
    Column('story_id', String(100), ForeignKey('stories.id'), nullable=True),
    Column('read', Boolean, nullable=False, server_default='false'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_notifications_user_created', 'user_id', 'created_at'),
)

highlights = Table(
    'highlights',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('user_id', String(100), ForeignKey('users.id'), nullable=False),
    Column('story_id', String(100), ForeignKey('stories.id'), nullable=False),
    Column('chapter_id', String(100), ForeignKey('chapters.id', ondelete='SET NULL'), nullable=True),
    Column('selected_text', Text, nullable=False),
    Column('start_offset', Integer, nullable=False),
    Column('end_offset', Integer, nullable=False),
    Column('color', String(50), nullable=False, server_default='yellow'),
    Column('note', Text, nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_highlights_story_user', 'story_id', 'user_id'),
)

bookmarks = Table(
    'bookmarks',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('user_id', String(100), ForeignKey('users.id'), nullable=False),
    Column('story_id', String(100), ForeignKey('stories.id'), nullable=False),
    Column('chapter_id', String(100), ForeignKey('chapters.id', ondelete='SET NULL'), nullable=True),
    Column('position', Integer, nullable=False),  # Character position in story/chapter
    Column('note', Text, nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Natural key for create_bookmark upserts
    UniqueConstraint('user_id', 'story_id', name='uq_bookmarks_user_story'),
    Index('idx_bookmarks_user_created', 'user_id', 'created_at'),
)

quotes = Table(
    'quotes',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('user_id', String(100), ForeignKey('users.id'), nullable=False),
    Column('story_id', String(100), ForeignKey('stories.id'), nullable=False),
    Column('chapter_id', String(100), ForeignKey('chapters.id', ondelete='SET NULL'), nullable=True),
    Column('quote_text', Text, nullable=False),
    Column('is_public', Boolean, nullable=False, server_default='true'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_quotes_user_created', 'user_id', 'created_at'),
    Index('idx_quotes_public_created', 'is_public', 'created_at'),
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Engine and session factory for one database.

    Constructed once by the caller and handed to the ContentStore; nothing in
    this package keeps a module-level engine.

    Usage:
        db = Database("postgresql://...")
        with db.session() as session:
            session.execute(...)
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
    ):
        if not url:
            raise ValueError(
                "DATABASE_URL is not configured. "
                "Set DATABASE_URL in environment or .env file."
            )
        self.url = url

        if url.startswith("sqlite"):
            # In-memory SQLite must share a single connection across sessions
            self.engine: Engine = create_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=echo,
            )
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(
                url,
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                echo=echo,
            )

        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None, *, test: bool = False) -> "Database":
        """
        Build a Database from settings.

        With test=True, TEST_DATABASE_URL wins over DATABASE_URL.
        """
        cfg = cfg or settings
        url = (cfg.TEST_DATABASE_URL if test else None) or cfg.DATABASE_URL
        return cls(
            url,
            echo=cfg.DB_ECHO,
            pool_size=cfg.DB_POOL_SIZE,
            max_overflow=cfg.DB_MAX_OVERFLOW,
            pool_timeout=cfg.DB_POOL_TIMEOUT,
            pool_recycle=cfg.DB_POOL_RECYCLE,
        )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Transactional session scope.

        Commits when the block exits cleanly, rolls back and re-raises
        otherwise, and always closes the session.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """
        Create all tables defined in metadata.

        This is idempotent - tables that already exist will not be recreated.
        """
        metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        """
        Drop all tables defined in metadata.

        WARNING: This is destructive! Only use in tests or development.
        """
        metadata.drop_all(bind=self.engine)

    def reset(self) -> None:
        """Drop and recreate every table. Tests only."""
        self.drop_all()
        self.create_all()

    def check_connection(self) -> bool:
        """
        Check if database connection is available.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database connection check failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()
