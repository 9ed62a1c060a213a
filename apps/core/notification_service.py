# apps/core/notification_service.py

"""
Notification service - persistence plus realtime push to the user's group
"""

import logging
from typing import List, Tuple

from django.conf import settings

from .models import Notification, User
from .utils import broadcast, user_group_name

logger = logging.getLogger(__name__)


class NotificationService:
    """
    In-app notifications

    Every lookup is scoped to the requesting user: another user's
    notification id behaves exactly like a missing one.
    """

    def __init__(self):
        self._limit = getattr(settings, 'TASKBOARD_NOTIFICATIONS_LIMIT', 20)

    def get_notifications(self, user: User) -> Tuple[List[Notification], int]:
        """Latest notifications (newest first) and the unread count"""
        notifications = list(
            Notification.objects.filter(user=user).order_by('-created_at', '-id')[:self._limit]
        )
        unread_count = Notification.objects.filter(user=user, is_read=False).count()
        return notifications, unread_count

    def create_notification(self, user: User, type: str, title: str, message: str, link: str = '') -> Notification:
        """Stores the notification and pushes it to the user's websocket group"""
        notification = Notification.objects.create(
            user=user,
            type=type,
            title=title,
            message=message,
            link=link,
        )

        broadcast(user_group_name(user.id), 'notification_message', notification.to_dict())
        logger.info(f"🔔 {type} notification for {user.email}")

        return notification

    def mark_as_read(self, user: User, notification_id) -> Tuple[bool, str]:
        updated = Notification.objects.filter(id=notification_id, user=user).update(is_read=True)
        if not updated:
            return False, "Notification not found"
        return True, "Notification marked as read"

    def mark_all_as_read(self, user: User) -> int:
        """Returns how many notifications changed"""
        return Notification.objects.filter(user=user, is_read=False).update(is_read=True)

    def delete_notification(self, user: User, notification_id) -> Tuple[bool, str]:
        deleted, _ = Notification.objects.filter(id=notification_id, user=user).delete()
        if not deleted:
            return False, "Notification not found"
        return True, "Notification deleted"


notification_service = NotificationService()
