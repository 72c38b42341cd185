"""
inkwell/features/stories/chapter_persistence.py

Chapters of a story. Publishing mirrors stories; deletion is a hard delete
that detaches highlights, bookmarks and quotes instead of removing them.
"""

from typing import Optional, List
from sqlalchemy import select, insert, update, delete, func

from inkwell.core.database import chapters, stories, highlights, bookmarks, quotes
from inkwell.core.logging import log_event
from inkwell.core.persistence import Persistence
from inkwell.models.story import Chapter, NewChapter, ChapterPatch


def _chapter_from_row(row) -> Chapter:
    return Chapter.model_validate(dict(row._mapping))


class ChapterPersistence(Persistence):

    def create_chapter(self, data: NewChapter) -> Chapter:
        """
        Insert an unpublished chapter and switch its story to chapter mode.

        Both writes share one transaction.
        """
        now = self._now()
        row_values = data.model_dump(mode="json")
        row_values.update(
            id=self._new_id(),
            published=False,
            published_at=None,
            created_at=now,
            updated_at=now,
        )
        with self.db.session() as session:
            row = session.execute(
                insert(chapters).values(**row_values).returning(*chapters.c)
            ).one()
            session.execute(
                update(stories)
                .where(stories.c.id == data.story_id)
                .values(has_chapters=True, updated_at=now)
            )
            return _chapter_from_row(row)

    def get_chapter(self, chapter_id: str) -> Optional[Chapter]:
        with self.db.session() as session:
            row = session.execute(select(chapters).where(chapters.c.id == chapter_id)).first()
            return _chapter_from_row(row) if row else None

    def get_story_chapters(self, story_id: str) -> List[Chapter]:
        """All chapters of a story by ascending chapter number, published or not."""
        with self.db.session() as session:
            rows = session.execute(
                select(chapters)
                .where(chapters.c.story_id == story_id)
                .order_by(chapters.c.chapter_number, chapters.c.created_at)
            ).all()
            return [_chapter_from_row(row) for row in rows]

    def next_chapter_number(self, story_id: str) -> int:
        with self.db.session() as session:
            current = session.execute(
                select(func.max(chapters.c.chapter_number)).where(chapters.c.story_id == story_id)
            ).scalar()
            return (current or 0) + 1

    def update_chapter(self, chapter_id: str, patch: ChapterPatch) -> Optional[Chapter]:
        changes = patch.model_dump(mode="json", exclude_unset=True)
        changes["updated_at"] = self._now()
        return self._update_chapter(chapter_id, changes)

    def publish_chapter(self, chapter_id: str) -> Optional[Chapter]:
        now = self._now()
        chapter = self._update_chapter(chapter_id, {"published": True, "published_at": now, "updated_at": now})
        if chapter:
            log_event("info", "chapter.published", story_id=chapter.story_id, event_type="chapter.publish",
                      extra={"chapter_id": chapter_id})
        return chapter

    def delete_chapter(self, chapter_id: str) -> bool:
        """
        Hard-delete a chapter.

        Highlights, bookmarks and quotes pointing at it keep their story
        reference and lose the chapter reference.

        Returns:
            True if a chapter was deleted, False if none matched
        """
        with self.db.session() as session:
            for table in (highlights, bookmarks, quotes):
                session.execute(
                    update(table)
                    .where(table.c.chapter_id == chapter_id)
                    .values(chapter_id=None)
                )
            result = session.execute(delete(chapters).where(chapters.c.id == chapter_id))
            deleted = result.rowcount > 0

        if deleted:
            log_event("info", "chapter.deleted", event_type="chapter.delete", extra={"chapter_id": chapter_id})
        return deleted

    def _update_chapter(self, chapter_id: str, values: dict) -> Optional[Chapter]:
        with self.db.session() as session:
            row = session.execute(
                update(chapters)
                .where(chapters.c.id == chapter_id)
                .values(**values)
                .returning(*chapters.c)
            ).first()
            return _chapter_from_row(row) if row else None
