"""
inkwell/store.py

ContentStore: the single object the request layer talks to.

It owns no state beyond the injected Database handle, so one instance can
serve concurrent requests. Missing rows come back as None (or False for
deletes); database errors propagate unchanged.

Usage:
    db = Database.from_settings()
    db.create_all()
    store = ContentStore(db)
    store.toggle_like(user_id, story_id)
"""

from inkwell.features.users.persistence import UserPersistence
from inkwell.features.stories.persistence import StoryPersistence
from inkwell.features.stories.chapter_persistence import ChapterPersistence
from inkwell.features.drafts.persistence import DraftPersistence
from inkwell.features.likes.persistence import LikePersistence
from inkwell.features.engagement.persistence import EngagementPersistence


class ContentStore(
    UserPersistence,
    StoryPersistence,
    ChapterPersistence,
    DraftPersistence,
    LikePersistence,
    EngagementPersistence,
):
    """Users, stories, chapters, drafts, likes, notifications and engagement."""
