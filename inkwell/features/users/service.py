"""
User domain service.
- sync_identity(store, identity): first login creates, later logins refresh
- get_profile(store, user_id)
- update_profile(store, user_id, patch)
"""

from typing import Optional

from inkwell.core.errors import NotFoundError
from inkwell.models.user import User, UserIdentity, UserPatch
from inkwell.store import ContentStore


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def sync_identity(store: ContentStore, identity: UserIdentity) -> User:
    return store.upsert_user(identity)


def get_profile(store: ContentStore, user_id: str) -> User:
    user = store.get_user(user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


def update_profile(store: ContentStore, user_id: str, patch: UserPatch) -> User:
    """Blank username, bio or image clear the field rather than storing ''."""
    cleaned = {
        field: _blank_to_none(value) if field in ("username", "bio", "profile_image_url") else value
        for field, value in patch.model_dump(exclude_unset=True).items()
    }
    user = store.update_user(user_id, UserPatch(**cleaned))
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user
