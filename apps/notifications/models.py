from django.db import models
from django.conf import settings
from core.constants import NOTIFICATION_TYPE_CHOICES


class Notification(models.Model):
    """In-app notification; the persisted record is the durable fact, push delivery is best-effort."""
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=30, choices=NOTIFICATION_TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    read = models.BooleanField(default=False)
    # job id, bid amount and similar references
    data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', 'read']),
        ]

    def __str__(self):
        return f"Notification to {self.recipient.username} - {self.type}"
