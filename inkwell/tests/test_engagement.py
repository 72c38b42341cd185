"""
Highlights, bookmarks and quotes.

Covers:
- Bookmark upsert keyed on (user, story)
- Highlight duplicates and text ordering
- Quote feeds with embedded story and reader
"""

from inkwell.models.engagement import NewBookmark, NewHighlight, NewQuote


def test_bookmark_twice_keeps_one_row_with_latest_note(store, alice, bob, make_story):
    story = make_story(alice.id, published=True)

    first = store.create_bookmark(NewBookmark(user_id=bob.id, story_id=story.id, position=120, note="first"))
    second = store.create_bookmark(NewBookmark(user_id=bob.id, story_id=story.id, position=999, note="second"))

    assert second.id == first.id
    assert second.note == "second"
    assert second.position == 120
    assert second.created_at > first.created_at

    [only] = store.get_user_bookmarks(bob.id)
    assert only.id == first.id
    assert only.note == "second"


def test_bookmarks_per_story_and_user_are_separate(store, alice, bob, make_story):
    one = make_story(alice.id, "One", published=True)
    two = make_story(alice.id, "Two", published=True)
    store.create_bookmark(NewBookmark(user_id=bob.id, story_id=one.id))
    store.create_bookmark(NewBookmark(user_id=bob.id, story_id=two.id))
    store.create_bookmark(NewBookmark(user_id=alice.id, story_id=one.id))

    listed = store.get_user_bookmarks(bob.id)

    assert [b.story.id for b in listed] == [two.id, one.id]
    assert listed[0].story.title == "Two"
    assert all(b.position == 0 for b in listed)


def test_delete_bookmark(store, alice, bob, make_story):
    story = make_story(alice.id, published=True)
    bookmark = store.create_bookmark(NewBookmark(user_id=bob.id, story_id=story.id))

    assert store.delete_bookmark(bookmark.id) is True
    assert store.get_user_bookmarks(bob.id) == []
    assert store.delete_bookmark(bookmark.id) is False


def test_highlights_allow_duplicates_and_sort_by_offset(store, alice, bob, make_story):
    story = make_story(alice.id, published=True)

    def highlight(user_id, start, end):
        return store.create_highlight(NewHighlight(
            user_id=user_id, story_id=story.id, selected_text="words", start_offset=start, end_offset=end,
        ))

    late = highlight(bob.id, 40, 50)
    early = highlight(bob.id, 5, 10)
    again = highlight(bob.id, 5, 10)
    highlight(alice.id, 0, 3)

    listed = store.get_story_highlights(story.id, bob.id)

    assert len(listed) == 3
    assert listed[-1].id == late.id
    assert {h.id for h in listed[:2]} == {early.id, again.id}
    assert listed[0].color == "yellow"


def test_delete_highlight(store, alice, bob, make_story):
    story = make_story(alice.id, published=True)
    highlight = store.create_highlight(NewHighlight(
        user_id=bob.id, story_id=story.id, selected_text="x", start_offset=1, end_offset=2, note="nice",
    ))

    assert store.get_highlight(highlight.id).note == "nice"
    assert store.delete_highlight(highlight.id) is True
    assert store.get_story_highlights(story.id, bob.id) == []


def test_user_quotes_include_private(store, alice, bob, make_story):
    story = make_story(alice.id, "Quoted", published=True)
    public = store.create_quote(NewQuote(user_id=bob.id, story_id=story.id, quote_text="Out loud"))
    private = store.create_quote(NewQuote(user_id=bob.id, story_id=story.id, quote_text="Quietly", is_public=False))

    listed = store.get_user_quotes(bob.id)

    assert [q.id for q in listed] == [private.id, public.id]
    assert listed[0].story.title == "Quoted"


def test_public_quotes_feed(store, alice, bob, make_story):
    story = make_story(alice.id, "Quoted", published=True)
    shared = store.create_quote(NewQuote(user_id=bob.id, story_id=story.id, quote_text="Share me"))
    store.create_quote(NewQuote(user_id=bob.id, story_id=story.id, quote_text="Keep me", is_public=False))
    own = store.create_quote(NewQuote(user_id=alice.id, story_id=story.id, quote_text="Mine"))

    feed = store.get_public_quotes()

    assert [q.id for q in feed] == [own.id, shared.id]
    assert feed[1].user.id == bob.id
    assert feed[1].user.username == "bob"
    assert feed[1].story.id == story.id


def test_delete_quote(store, alice, bob, make_story):
    story = make_story(alice.id, published=True)
    quote = store.create_quote(NewQuote(user_id=bob.id, story_id=story.id, quote_text="Gone soon"))

    assert store.delete_quote(quote.id) is True
    assert store.get_quote(quote.id) is None
    assert store.get_public_quotes() == []
