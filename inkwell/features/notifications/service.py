"""Notification service: a user's inbox."""

from typing import List

from inkwell.core.errors import NotFoundError, PermissionError
from inkwell.models.notification import Notification
from inkwell.store import ContentStore


def list_notifications(store: ContentStore, user_id: str) -> List[Notification]:
    return store.get_user_notifications(user_id)


def mark_read(store: ContentStore, user_id: str, notification_id: str) -> None:
    notification = store.get_notification(notification_id)
    if not notification:
        raise NotFoundError(f"Notification {notification_id} not found")
    if notification.user_id != user_id:
        raise PermissionError("Not authorized")
    store.mark_notification_read(notification_id)
