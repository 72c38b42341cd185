"""
inkwell/features/stories/chapter_service.py
Chapter service: the story's author writes chapters, readers see published
ones.
"""

from typing import List

from inkwell.core.errors import NotFoundError, PermissionError
from inkwell.models.story import Chapter, ChapterRequest, NewChapter, ChapterPatch, Story
from inkwell.store import ContentStore


def _authored_chapter(store: ContentStore, user_id: str, chapter_id: str) -> Chapter:
    """Chapter the user may modify: 404 when missing, 403 when not the story's author."""
    chapter = store.get_chapter(chapter_id)
    if not chapter:
        raise NotFoundError(f"Chapter {chapter_id} not found")
    story = store.get_story(chapter.story_id)
    if not story or story.author_id != user_id:
        raise PermissionError("Not authorized")
    return chapter


def add_chapter(store: ContentStore, user_id: str, story_id: str, request: ChapterRequest) -> Chapter:
    """
    Add a chapter to one of the user's stories.

    The story switches to chapter mode. chapter_number defaults to one past
    the highest existing number; an explicit number is stored as given even
    if another chapter already uses it.
    """
    story = store.get_story(story_id)
    if not story or story.author_id != user_id:
        raise NotFoundError(f"Story {story_id} not found")

    fields = request.model_dump()
    if request.chapter_number is None:
        fields["chapter_number"] = store.next_chapter_number(story_id)
    if request.word_count is None:
        fields["word_count"] = Story.count_words(request.content)
    return store.create_chapter(NewChapter(**fields, story_id=story_id))


def list_chapters(store: ContentStore, story_id: str) -> List[Chapter]:
    return store.get_story_chapters(story_id)


def get_readable_chapter(store: ContentStore, user_id: str, chapter_id: str) -> Chapter:
    """Published chapters are public; unpublished ones only reach their author."""
    chapter = store.get_chapter(chapter_id)
    if not chapter:
        raise NotFoundError(f"Chapter {chapter_id} not found")
    if chapter.published:
        return chapter
    story = store.get_story(chapter.story_id)
    if not story or story.author_id != user_id:
        raise NotFoundError(f"Chapter {chapter_id} not found")
    return chapter


def update_chapter(store: ContentStore, user_id: str, chapter_id: str, patch: ChapterPatch) -> Chapter:
    _authored_chapter(store, user_id, chapter_id)
    if "content" in patch.model_fields_set and "word_count" not in patch.model_fields_set:
        patch = ChapterPatch(**patch.model_dump(exclude_unset=True), word_count=Story.count_words(patch.content))
    chapter = store.update_chapter(chapter_id, patch)
    if not chapter:
        raise NotFoundError(f"Chapter {chapter_id} not found")
    return chapter


def publish_chapter(store: ContentStore, user_id: str, chapter_id: str) -> Chapter:
    _authored_chapter(store, user_id, chapter_id)
    chapter = store.publish_chapter(chapter_id)
    if not chapter:
        raise NotFoundError(f"Chapter {chapter_id} not found")
    return chapter


def delete_chapter(store: ContentStore, user_id: str, chapter_id: str) -> None:
    _authored_chapter(store, user_id, chapter_id)
    if not store.delete_chapter(chapter_id):
        raise NotFoundError(f"Chapter {chapter_id} not found")
