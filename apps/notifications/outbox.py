import logging

from django.apps import apps
from django.conf import settings
from django.db import transaction

from core.exceptions import NotFound
from .models import Notification

logger = logging.getLogger(__name__)


class NotificationOutbox:
    """Persists per-user notifications and pushes them to connected clients."""

    def __init__(self, push):
        self.push = push

    def notify(self, user_id, type, title, message, data=None):
        notification = Notification.objects.create(
            recipient_id=user_id,
            type=type,
            title=title,
            message=message,
            data=data or {},
        )
        payload = {
            'notification': {
                'id': notification.id,
                'type': type,
                'title': title,
                'message': message,
                'data': notification.data,
            }
        }
        # clients only hear about rows that committed
        transaction.on_commit(lambda: self.push.publish(user_id, 'notification', payload))
        return notification

    def list_for_user(self, user_id, limit=None):
        limit = limit or settings.MARKETPLACE['NOTIFICATION_LIMIT']
        return list(Notification.objects.filter(recipient_id=user_id).order_by('-created_at', '-id')[:limit])

    def unread_count(self, user_id):
        return Notification.objects.filter(recipient_id=user_id, read=False).count()

    def mark_read(self, notification_id):
        try:
            notification = Notification.objects.get(pk=notification_id)
        except Notification.DoesNotExist:
            raise NotFound("Notification not found")
        if not notification.read:
            notification.read = True
            notification.save(update_fields=['read'])
        return notification

    def mark_all_read(self, user_id):
        updated = Notification.objects.filter(recipient_id=user_id, read=False).update(read=True)
        logger.info(f"Marked {updated} notifications read for user {user_id}")
        return updated


def get_outbox():
    """Outbox bound to the process-wide push registry owned by the notifications app."""
    return NotificationOutbox(apps.get_app_config('notifications').push_registry)
