"""
inkwell/features/stories/service.py
Story service: create, edit, publish and read stories on behalf of a user.

Ownership rule: only a story's author may change it. A story that is missing
or belongs to someone else reads as not found, except for enable_chapters,
which reports the ownership failure explicitly.
"""

from typing import List, Optional

from inkwell.core.errors import NotFoundError, PermissionError
from inkwell.core.logging import log_event
from inkwell.models.story import (
    Story,
    StoryWithAuthor,
    StoryRequest,
    NewStory,
    StoryPatch,
)
from inkwell.store import ContentStore


def _owned_story(store: ContentStore, user_id: str, story_id: str) -> Story:
    story = store.get_story(story_id)
    if not story or story.author_id != user_id:
        raise NotFoundError(f"Story {story_id} not found")
    return story


def create_story(store: ContentStore, user_id: str, request: StoryRequest) -> Story:
    """Create an unpublished story authored by user_id."""
    fields = request.model_dump()
    if request.word_count is None:
        fields["word_count"] = Story.count_words(request.content)
    return store.create_story(NewStory(**fields, author_id=user_id))


def get_public_story(store: ContentStore, story_id: str) -> Story:
    story = store.get_story(story_id)
    if not story or not story.published:
        raise NotFoundError(f"Story {story_id} not found")
    return story


def update_story(store: ContentStore, user_id: str, story_id: str, patch: StoryPatch) -> Story:
    _owned_story(store, user_id, story_id)
    if "content" in patch.model_fields_set and "word_count" not in patch.model_fields_set:
        patch = StoryPatch(**patch.model_dump(exclude_unset=True), word_count=Story.count_words(patch.content))
    story = store.update_story(story_id, patch)
    if not story:
        raise NotFoundError(f"Story {story_id} not found")
    return story


def publish_story(store: ContentStore, user_id: str, story_id: str) -> Story:
    _owned_story(store, user_id, story_id)
    story = store.publish_story(story_id)
    if not story:
        raise NotFoundError(f"Story {story_id} not found")
    return story


def enable_chapters(store: ContentStore, user_id: str, story_id: str) -> Story:
    story = store.get_story(story_id)
    if not story:
        raise NotFoundError(f"Story {story_id} not found")
    if story.author_id != user_id:
        log_event("warning", "story.enable_chapters.denied", user_id=user_id, story_id=story_id,
                  error_code="forbidden")
        raise PermissionError("Not authorized to modify this story")
    updated = store.enable_chapters_on_story(story_id)
    if not updated:
        raise NotFoundError(f"Story {story_id} not found")
    return updated


def list_feed(
    store: ContentStore,
    category: Optional[str] = None,
    sort_by: Optional[str] = None,
) -> List[StoryWithAuthor]:
    return store.get_published_stories(category=category, sort_by=sort_by)


def list_author_stories(store: ContentStore, author_id: str) -> List[Story]:
    return store.get_stories_by_author(author_id)


def list_liked_stories(store: ContentStore, user_id: str) -> List[StoryWithAuthor]:
    return store.get_user_liked_stories(user_id)
