"""
inkwell/models/story.py
Story and chapter models: persisted rows, create requests, patches and the
feed read model.
"""

import re
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from enum import Enum
from typing import Optional

from inkwell.models.user import User


_WORD_RE = re.compile(r"\S+")


class StoryCategory(str, Enum):
    STORY = "story"
    POEM = "poem"
    FANFICTION = "fanfiction"


# Sentinel accepted by the feed query meaning "no category filter"
ALL_CATEGORIES = "all"


def _reject_null(value):
    """Patch fields backed by NOT NULL columns may be omitted but not cleared."""
    if value is None:
        raise ValueError("field cannot be null")
    return value


class StorySort(str, Enum):
    """Feed ordering. Anything that is not RECENT sorts as TRENDING."""

    RECENT = "recent"
    TRENDING = "trending"


class Story(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str
    excerpt: Optional[str] = None
    category: StoryCategory
    cover_image_url: Optional[str] = None
    author_id: str
    published: bool = False
    published_at: Optional[datetime] = None
    word_count: int = 0
    has_chapters: bool = False
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def count_words(text: Optional[str]) -> int:
        if not text:
            return 0
        return len(_WORD_RE.findall(text))


class StoryWithAuthor(Story):
    """Feed row: story fields plus the author's profile and like count."""

    author: User
    like_count: int = 0


class StoryRequest(BaseModel):
    """Request to create a story. The author is the acting user."""

    title: str = Field(min_length=1)
    content: str
    excerpt: Optional[str] = None
    category: StoryCategory
    cover_image_url: Optional[str] = None
    word_count: Optional[int] = Field(default=None, ge=0, description="Counted from content when omitted")
    has_chapters: bool = False


class NewStory(StoryRequest):
    """Insertable story fields. The store always creates it unpublished."""

    author_id: str
    word_count: int = Field(default=0, ge=0)


class StoryPatch(BaseModel):
    """
    Mutable story fields.

    Publishing goes through publish_story and chapter mode through
    enable_chapters_on_story, so neither flag is patchable here.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[StoryCategory] = None
    cover_image_url: Optional[str] = None
    word_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("title", "content", "category", "word_count", mode="before")
    @classmethod
    def _not_null(cls, value):
        return _reject_null(value)


class Chapter(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    story_id: str
    title: str
    content: str
    chapter_number: int
    published: bool = False
    published_at: Optional[datetime] = None
    word_count: int = 0
    created_at: datetime
    updated_at: datetime


class ChapterRequest(BaseModel):
    """Request to add a chapter to a story."""

    title: str = Field(min_length=1)
    content: str
    chapter_number: Optional[int] = Field(default=None, ge=1, description="Next free number when omitted")
    word_count: Optional[int] = Field(default=None, ge=0)


class NewChapter(ChapterRequest):
    story_id: str
    chapter_number: int = Field(ge=1)
    word_count: int = Field(default=0, ge=0)


class ChapterPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    chapter_number: Optional[int] = Field(default=None, ge=1)
    word_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("title", "content", "chapter_number", "word_count", mode="before")
    @classmethod
    def _not_null(cls, value):
        return _reject_null(value)
