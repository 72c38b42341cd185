from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from inkwell.models.story import StoryCategory


class Draft(BaseModel):
    """Author-only scratch work. Every content field may be empty."""

    model_config = ConfigDict(frozen=True)

    id: str
    author_id: str
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[StoryCategory] = None
    cover_image_url: Optional[str] = None
    character_data: Optional[Any] = Field(default=None, description="Free-form character chart")
    outline: Optional[str] = None
    word_count: int = 0
    created_at: datetime
    updated_at: datetime


class DraftRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[StoryCategory] = None
    cover_image_url: Optional[str] = None
    character_data: Optional[Any] = None
    outline: Optional[str] = None
    word_count: Optional[int] = Field(default=None, ge=0, description="Counted from content when omitted")


class NewDraft(DraftRequest):
    author_id: str
    word_count: int = Field(default=0, ge=0)


class DraftPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[StoryCategory] = None
    cover_image_url: Optional[str] = None
    character_data: Optional[Any] = None
    outline: Optional[str] = None
    word_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("word_count", mode="before")
    @classmethod
    def _word_count_not_null(cls, value):
        if value is None:
            raise ValueError("word_count cannot be null")
        return value
