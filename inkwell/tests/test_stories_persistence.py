"""
Story lifecycle through the content store.

Covers:
- Unpublished creation and the published/published_at invariant
- Re-publishing, patches and chapter mode
- Author story listing
"""

import pytest
from pydantic import ValidationError

from inkwell.models.story import StoryCategory, StoryPatch


def test_created_story_is_unpublished(store, alice, make_story):
    story = make_story(alice.id, "Draft-like")

    assert story.published is False
    assert story.published_at is None
    assert story.has_chapters is False
    assert story.word_count == 0
    assert story.author_id == alice.id

    stored = store.get_story(story.id)
    assert stored == story


def test_publish_sets_timestamp_after_creation(store, alice, make_story):
    story = make_story(alice.id)

    published = store.publish_story(story.id)

    assert published.published is True
    assert published.published_at is not None
    assert published.published_at >= published.created_at
    assert published.updated_at == published.published_at


def test_republish_moves_published_at_forward(store, alice, make_story):
    story = make_story(alice.id, published=True)

    again = store.publish_story(story.id)

    assert again.published is True
    assert again.published_at > story.published_at


def test_publish_missing_story_returns_none(store):
    assert store.publish_story("no-such-story") is None
    assert store.get_story("no-such-story") is None


def test_update_story_patches_only_set_fields(store, alice, make_story):
    story = make_story(alice.id, "Old title", excerpt="Old excerpt")

    updated = store.update_story(story.id, StoryPatch(title="New title"))

    assert updated.title == "New title"
    assert updated.excerpt == "Old excerpt"
    assert updated.content == story.content
    assert updated.updated_at > story.updated_at
    assert updated.created_at == story.created_at


def test_update_story_can_clear_nullable_field(store, alice, make_story):
    story = make_story(alice.id, excerpt="Teaser")

    updated = store.update_story(story.id, StoryPatch(excerpt=None))

    assert updated.excerpt is None


def test_update_missing_story_returns_none(store):
    assert store.update_story("missing", StoryPatch(title="x")) is None


@pytest.mark.parametrize(
    "field", ["id", "created_at", "author_id", "published_at", "published", "has_chapters", "unknown"]
)
def test_story_patch_rejects_immutable_or_unknown_fields(field):
    with pytest.raises(ValidationError):
        StoryPatch(**{field: "value"})


@pytest.mark.parametrize("field", ["title", "content", "category", "word_count"])
def test_story_patch_rejects_null_for_required_fields(field):
    with pytest.raises(ValidationError):
        StoryPatch(**{field: None})


def test_rejected_null_patch_leaves_story_untouched(store, alice, make_story):
    story = make_story(alice.id, "Kept")

    with pytest.raises(ValidationError):
        store.update_story(story.id, StoryPatch(content=None, category=None))

    assert store.get_story(story.id) == story


def test_enable_chapters_sets_flag(store, alice, make_story):
    story = make_story(alice.id)

    updated = store.enable_chapters_on_story(story.id)

    assert updated.has_chapters is True
    assert updated.published is False


def test_stories_by_author_lists_only_published_newest_first(store, alice, bob, make_story):
    first = make_story(alice.id, "First", published=True)
    make_story(alice.id, "Unpublished")
    second = make_story(alice.id, "Second", published=True)
    make_story(bob.id, "Bob's", published=True)

    listed = store.get_stories_by_author(alice.id)

    assert [s.id for s in listed] == [second.id, first.id]


def test_category_round_trips_as_enum(store, alice, make_story):
    story = make_story(alice.id, category=StoryCategory.FANFICTION)

    assert store.get_story(story.id).category is StoryCategory.FANFICTION
