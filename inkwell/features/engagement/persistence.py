"""
inkwell/features/engagement/persistence.py

Highlights, bookmarks and quotes a reader attaches to someone's story.

Highlights and quotes always insert. A bookmark is unique per
(user, story): bookmarking again keeps the row id, replaces the note and
moves created_at to now.
"""

from typing import Optional, List
from sqlalchemy import select, insert, delete, and_

from inkwell.core.database import highlights, bookmarks, quotes, stories, users
from inkwell.core.logging import log_event
from inkwell.core.persistence import Persistence, labeled_columns, unlabel
from inkwell.models.engagement import (
    Highlight,
    NewHighlight,
    Bookmark,
    NewBookmark,
    BookmarkWithStory,
    Quote,
    NewQuote,
    QuoteWithStory,
    PublicQuote,
)
from inkwell.models.story import Story
from inkwell.models.user import User


STORY_PREFIX = "story__"
USER_PREFIX = "user__"


class EngagementPersistence(Persistence):

    # Highlights

    def create_highlight(self, data: NewHighlight) -> Highlight:
        row_values = data.model_dump(mode="json")
        row_values.update(id=self._new_id(), created_at=self._now())
        with self.db.session() as session:
            row = session.execute(
                insert(highlights).values(**row_values).returning(*highlights.c)
            ).one()
            return Highlight.model_validate(dict(row._mapping))

    def get_highlight(self, highlight_id: str) -> Optional[Highlight]:
        with self.db.session() as session:
            row = session.execute(select(highlights).where(highlights.c.id == highlight_id)).first()
            return Highlight.model_validate(dict(row._mapping)) if row else None

    def get_story_highlights(self, story_id: str, user_id: str) -> List[Highlight]:
        """One reader's highlights on one story, in text order."""
        with self.db.session() as session:
            rows = session.execute(
                select(highlights)
                .where(and_(highlights.c.story_id == story_id, highlights.c.user_id == user_id))
                .order_by(highlights.c.start_offset)
            ).all()
            return [Highlight.model_validate(dict(row._mapping)) for row in rows]

    def delete_highlight(self, highlight_id: str) -> bool:
        return self._delete(highlights, highlight_id)

    # Bookmarks

    def create_bookmark(self, data: NewBookmark) -> Bookmark:
        """
        Insert-or-touch keyed on (user_id, story_id).

        On an existing bookmark only note and created_at change; position
        and chapter_id keep their stored values.
        """
        now = self._now()
        row_values = data.model_dump(mode="json")
        row_values.update(id=self._new_id(), created_at=now)
        stmt = (
            self._upsert(bookmarks)
            .values(**row_values)
            .on_conflict_do_update(
                index_elements=["user_id", "story_id"],
                set_={"note": data.note, "created_at": now},
            )
            .returning(*bookmarks.c)
        )
        with self.db.session() as session:
            row = session.execute(stmt).one()
            bookmark = Bookmark.model_validate(dict(row._mapping))

        log_event(
            "info",
            "bookmark.saved",
            user_id=bookmark.user_id,
            story_id=bookmark.story_id,
            event_type="bookmark.upsert",
            extra={"bookmark_id": bookmark.id, "touched": bookmark.id != row_values["id"]},
        )
        return bookmark

    def get_bookmark(self, bookmark_id: str) -> Optional[Bookmark]:
        with self.db.session() as session:
            row = session.execute(select(bookmarks).where(bookmarks.c.id == bookmark_id)).first()
            return Bookmark.model_validate(dict(row._mapping)) if row else None

    def get_user_bookmarks(self, user_id: str) -> List[BookmarkWithStory]:
        """Newest first, each with its story."""
        query = (
            select(*bookmarks.c, *labeled_columns(stories, STORY_PREFIX))
            .select_from(bookmarks.outerjoin(stories, bookmarks.c.story_id == stories.c.id))
            .where(bookmarks.c.user_id == user_id)
            .order_by(bookmarks.c.created_at.desc())
        )
        with self.db.session() as session:
            rows = session.execute(query).all()
            result = []
            for row in rows:
                fields = unlabel(row._mapping, bookmarks)
                fields["story"] = Story.model_validate(unlabel(row._mapping, stories, STORY_PREFIX))
                result.append(BookmarkWithStory.model_validate(fields))
            return result

    def delete_bookmark(self, bookmark_id: str) -> bool:
        return self._delete(bookmarks, bookmark_id)

    # Quotes

    def create_quote(self, data: NewQuote) -> Quote:
        row_values = data.model_dump(mode="json")
        row_values.update(id=self._new_id(), created_at=self._now())
        with self.db.session() as session:
            row = session.execute(
                insert(quotes).values(**row_values).returning(*quotes.c)
            ).one()
            return Quote.model_validate(dict(row._mapping))

    def get_quote(self, quote_id: str) -> Optional[Quote]:
        with self.db.session() as session:
            row = session.execute(select(quotes).where(quotes.c.id == quote_id)).first()
            return Quote.model_validate(dict(row._mapping)) if row else None

    def get_user_quotes(self, user_id: str) -> List[QuoteWithStory]:
        """Every quote the reader saved, public or not, newest first."""
        query = (
            select(*quotes.c, *labeled_columns(stories, STORY_PREFIX))
            .select_from(quotes.outerjoin(stories, quotes.c.story_id == stories.c.id))
            .where(quotes.c.user_id == user_id)
            .order_by(quotes.c.created_at.desc())
        )
        with self.db.session() as session:
            rows = session.execute(query).all()
            result = []
            for row in rows:
                fields = unlabel(row._mapping, quotes)
                fields["story"] = Story.model_validate(unlabel(row._mapping, stories, STORY_PREFIX))
                result.append(QuoteWithStory.model_validate(fields))
            return result

    def get_public_quotes(self) -> List[PublicQuote]:
        """Global feed of public quotes with their story and quoting reader."""
        query = (
            select(
                *quotes.c,
                *labeled_columns(stories, STORY_PREFIX),
                *labeled_columns(users, USER_PREFIX),
            )
            .select_from(
                quotes
                .outerjoin(stories, quotes.c.story_id == stories.c.id)
                .outerjoin(users, quotes.c.user_id == users.c.id)
            )
            .where(quotes.c.is_public.is_(True))
            .order_by(quotes.c.created_at.desc())
        )
        with self.db.session() as session:
            rows = session.execute(query).all()
            result = []
            for row in rows:
                mapping = row._mapping
                fields = unlabel(mapping, quotes)
                fields["story"] = Story.model_validate(unlabel(mapping, stories, STORY_PREFIX))
                fields["user"] = User.model_validate(unlabel(mapping, users, USER_PREFIX))
                result.append(PublicQuote.model_validate(fields))
            return result

    def delete_quote(self, quote_id: str) -> bool:
        return self._delete(quotes, quote_id)

    def _delete(self, table, row_id: str) -> bool:
        with self.db.session() as session:
            result = session.execute(delete(table).where(table.c.id == row_id))
            deleted = result.rowcount > 0
        if deleted:
            log_event("info", f"{table.name}.deleted", event_type=f"{table.name}.delete", extra={"row_id": row_id})
        return deleted
