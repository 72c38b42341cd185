"""
inkwell/features/notifications/persistence.py

Notifications are only ever created as a side effect (see toggle_like);
readers can list theirs and mark them read.
"""

from typing import Optional, List
from sqlalchemy import select, insert, update
from sqlalchemy.orm import Session

from inkwell.core.database import notifications
from inkwell.core.persistence import Persistence
from inkwell.models.notification import Notification, NotificationType


def _notification_from_row(row) -> Notification:
    return Notification.model_validate(dict(row._mapping))


class NotificationPersistence(Persistence):

    def create_notification(
        self,
        user_id: str,
        type: NotificationType,
        story_id: Optional[str] = None,
    ) -> Notification:
        with self.db.session() as session:
            return self._insert_notification(session, user_id, type, story_id)

    def _insert_notification(
        self,
        session: Session,
        user_id: str,
        type: NotificationType,
        story_id: Optional[str] = None,
    ) -> Notification:
        """Insert inside the caller's transaction."""
        row = session.execute(
            insert(notifications)
            .values(
                id=self._new_id(),
                user_id=user_id,
                type=NotificationType(type).value,
                story_id=story_id,
                read=False,
                created_at=self._now(),
            )
            .returning(*notifications.c)
        ).one()
        return _notification_from_row(row)

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        with self.db.session() as session:
            row = session.execute(
                select(notifications).where(notifications.c.id == notification_id)
            ).first()
            return _notification_from_row(row) if row else None

    def get_user_notifications(self, user_id: str) -> List[Notification]:
        """Newest first, capped at notification_limit."""
        with self.db.session() as session:
            rows = session.execute(
                select(notifications)
                .where(notifications.c.user_id == user_id)
                .order_by(notifications.c.created_at.desc())
                .limit(self.notification_limit)
            ).all()
            return [_notification_from_row(row) for row in rows]

    def mark_notification_read(self, notification_id: str) -> bool:
        with self.db.session() as session:
            result = session.execute(
                update(notifications)
                .where(notifications.c.id == notification_id)
                .values(read=True)
            )
            return result.rowcount > 0
