"""
inkwell/features/likes/persistence.py

Likes: existence of a (user, story) row is the whole signal.

toggle_like runs in a single transaction on top of the
uq_likes_user_story constraint:
1. Delete any existing like. If one went away, the result is unliked.
2. Otherwise insert with ON CONFLICT DO NOTHING. Only the request whose
   insert actually landed notifies the author, so two identical concurrent
   likes produce one row and one notification.
"""

from typing import List
from sqlalchemy import select, delete, and_, func
from sqlalchemy.orm import Session

from inkwell.core.database import likes, stories
from inkwell.core.logging import log_event
from inkwell.features.notifications.persistence import NotificationPersistence
from inkwell.models.engagement import LikeToggleResult
from inkwell.models.notification import NotificationType


class LikePersistence(NotificationPersistence):

    def toggle_like(self, user_id: str, story_id: str) -> LikeToggleResult:
        """
        Like the story if the user has not, otherwise remove the like.

        Liking someone else's story notifies its author; self-likes count
        but never notify. A story id that does not exist surfaces as an
        IntegrityError from the foreign key.

        Returns:
            LikeToggleResult with the new state and the story's like count
        """
        notified = False
        with self.db.session() as session:
            removed = session.execute(
                delete(likes).where(and_(likes.c.user_id == user_id, likes.c.story_id == story_id))
            )
            if removed.rowcount > 0:
                liked = False
            else:
                inserted = session.execute(
                    self._upsert(likes)
                    .values(
                        id=self._new_id(),
                        user_id=user_id,
                        story_id=story_id,
                        created_at=self._now(),
                    )
                    .on_conflict_do_nothing(index_elements=["user_id", "story_id"])
                )
                liked = True
                if inserted.rowcount > 0:
                    notified = self._notify_author(session, user_id, story_id)

            count = self._count_likes(session, story_id)

        log_event(
            "info",
            "like.toggled",
            user_id=user_id,
            story_id=story_id,
            event_type="like.toggle",
            extra={"liked": liked, "count": count, "notified": notified},
        )
        return LikeToggleResult(liked=liked, count=count)

    def _notify_author(self, session: Session, user_id: str, story_id: str) -> bool:
        author_id = session.execute(
            select(stories.c.author_id).where(stories.c.id == story_id)
        ).scalar_one_or_none()
        if author_id is None or author_id == user_id:
            return False
        self._insert_notification(session, author_id, NotificationType.LIKE, story_id)
        return True

    @staticmethod
    def _count_likes(session: Session, story_id: str) -> int:
        return session.execute(
            select(func.count()).select_from(likes).where(likes.c.story_id == story_id)
        ).scalar_one()

    def get_like_count(self, story_id: str) -> int:
        with self.db.session() as session:
            return self._count_likes(session, story_id)

    def get_user_likes(self, user_id: str) -> List[str]:
        """Ids of every story the user has liked."""
        with self.db.session() as session:
            rows = session.execute(
                select(likes.c.story_id)
                .where(likes.c.user_id == user_id)
                .order_by(likes.c.created_at.desc())
            ).all()
            return [row.story_id for row in rows]
