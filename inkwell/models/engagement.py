"""
inkwell/models/engagement.py
Reader engagement: likes, highlights, bookmarks and quotes.

Each entity has its own identity rule:
- Like: at most one per (user, story); toggled, never updated.
- Bookmark: at most one per (user, story); re-bookmarking updates it.
- Highlight, Quote: always inserted, duplicates allowed.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from inkwell.models.story import Story
from inkwell.models.user import User


class LikeToggleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    liked: bool
    count: int


class Highlight(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    story_id: str
    chapter_id: Optional[str] = None
    selected_text: str
    start_offset: int
    end_offset: int
    color: str = "yellow"
    note: Optional[str] = None
    created_at: datetime


class HighlightRequest(BaseModel):
    story_id: str
    chapter_id: Optional[str] = None
    selected_text: str = Field(min_length=1)
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    color: str = "yellow"
    note: Optional[str] = None


class NewHighlight(HighlightRequest):
    user_id: str


class Bookmark(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    story_id: str
    chapter_id: Optional[str] = None
    position: int
    note: Optional[str] = None
    created_at: datetime


class BookmarkRequest(BaseModel):
    story_id: str
    chapter_id: Optional[str] = None
    position: int = Field(default=0, ge=0, description="Character position in story/chapter")
    note: Optional[str] = None


class NewBookmark(BookmarkRequest):
    user_id: str


class BookmarkWithStory(Bookmark):
    story: Story


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    story_id: str
    chapter_id: Optional[str] = None
    quote_text: str
    is_public: bool = True
    created_at: datetime


class QuoteRequest(BaseModel):
    story_id: str
    chapter_id: Optional[str] = None
    quote_text: str = Field(min_length=1)
    is_public: bool = True


class NewQuote(QuoteRequest):
    user_id: str


class QuoteWithStory(Quote):
    story: Story


class PublicQuote(QuoteWithStory):
    """Entry in the global quote feed, attributed to the quoting reader."""

    user: User
