from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    username: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def display_name(self) -> str:
        if self.username:
            return self.username
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.id


class UserIdentity(BaseModel):
    """Profile fields supplied by the identity provider on login."""

    id: str = Field(min_length=1)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    username: Optional[str] = None


class UserPatch(BaseModel):
    """Editable profile fields. Identity and timestamps are not patchable."""

    model_config = ConfigDict(extra="forbid")

    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    username: Optional[str] = None
