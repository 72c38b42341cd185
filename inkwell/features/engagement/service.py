"""
inkwell/features/engagement/service.py
Reader engagement on behalf of the acting user: likes, highlights,
bookmarks and quotes.

A reader can only engage with a story they can read (published, or their
own). Only the reader who created a highlight, bookmark or quote may
remove it.
"""

from typing import List

from inkwell.core.errors import NotFoundError, PermissionError, ValidationError
from inkwell.models.engagement import (
    LikeToggleResult,
    Highlight,
    HighlightRequest,
    NewHighlight,
    Bookmark,
    BookmarkRequest,
    NewBookmark,
    BookmarkWithStory,
    Quote,
    QuoteRequest,
    NewQuote,
    QuoteWithStory,
    PublicQuote,
)
from inkwell.models.story import Story
from inkwell.store import ContentStore


def _readable_story(store: ContentStore, user_id: str, story_id: str) -> Story:
    story = store.get_story(story_id)
    if not story or not (story.published or story.author_id == user_id):
        raise NotFoundError(f"Story {story_id} not found")
    return story


def _check_owner(row_user_id: str, user_id: str, kind: str) -> None:
    if row_user_id != user_id:
        raise PermissionError(f"Not authorized to remove this {kind}")


# Likes

def like_story(store: ContentStore, user_id: str, story_id: str) -> LikeToggleResult:
    """Toggle the user's like on a readable story."""
    _readable_story(store, user_id, story_id)
    return store.toggle_like(user_id, story_id)


def like_count(store: ContentStore, story_id: str) -> int:
    return store.get_like_count(story_id)


def liked_story_ids(store: ContentStore, user_id: str) -> List[str]:
    return store.get_user_likes(user_id)


# Highlights

def add_highlight(store: ContentStore, user_id: str, request: HighlightRequest) -> Highlight:
    if request.end_offset < request.start_offset:
        raise ValidationError("end_offset must not be before start_offset")
    _readable_story(store, user_id, request.story_id)
    return store.create_highlight(NewHighlight(**request.model_dump(), user_id=user_id))


def list_highlights(store: ContentStore, user_id: str, story_id: str) -> List[Highlight]:
    return store.get_story_highlights(story_id, user_id)


def remove_highlight(store: ContentStore, user_id: str, highlight_id: str) -> None:
    highlight = store.get_highlight(highlight_id)
    if not highlight:
        raise NotFoundError(f"Highlight {highlight_id} not found")
    _check_owner(highlight.user_id, user_id, "highlight")
    store.delete_highlight(highlight_id)


# Bookmarks

def bookmark_story(store: ContentStore, user_id: str, request: BookmarkRequest) -> Bookmark:
    """Create the user's bookmark on the story, or refresh the existing one."""
    _readable_story(store, user_id, request.story_id)
    return store.create_bookmark(NewBookmark(**request.model_dump(), user_id=user_id))


def list_bookmarks(store: ContentStore, user_id: str) -> List[BookmarkWithStory]:
    return store.get_user_bookmarks(user_id)


def remove_bookmark(store: ContentStore, user_id: str, bookmark_id: str) -> None:
    bookmark = store.get_bookmark(bookmark_id)
    if not bookmark:
        raise NotFoundError(f"Bookmark {bookmark_id} not found")
    _check_owner(bookmark.user_id, user_id, "bookmark")
    store.delete_bookmark(bookmark_id)


# Quotes

def add_quote(store: ContentStore, user_id: str, request: QuoteRequest) -> Quote:
    _readable_story(store, user_id, request.story_id)
    return store.create_quote(NewQuote(**request.model_dump(), user_id=user_id))


def list_quotes(store: ContentStore, user_id: str) -> List[QuoteWithStory]:
    return store.get_user_quotes(user_id)


def list_public_quotes(store: ContentStore) -> List[PublicQuote]:
    return store.get_public_quotes()


def remove_quote(store: ContentStore, user_id: str, quote_id: str) -> None:
    quote = store.get_quote(quote_id)
    if not quote:
        raise NotFoundError(f"Quote {quote_id} not found")
    _check_owner(quote.user_id, user_id, "quote")
    store.delete_quote(quote_id)
