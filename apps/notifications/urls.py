from django.urls import path
from .views import UserNotificationsView, NotificationReadView, NotificationReadAllView

urlpatterns = [
    path('users/<int:user_id>/notifications', UserNotificationsView.as_view(), name='user_notifications'),
    path('users/<int:user_id>/notifications/read-all', NotificationReadAllView.as_view(), name='notifications_read_all'),
    path('notifications/<int:pk>/read', NotificationReadView.as_view(), name='notification_read'),
]
