from django.apps import AppConfig
from django.conf import settings


class NotificationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.notifications'

    def ready(self):
        from .push import build_registry
        self.push_registry = build_registry(settings.PUSH_RELAY_URL, settings.PUSH_RELAY_TIMEOUT)
