from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='recipient_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'userId', 'type', 'title', 'message', 'read', 'data', 'createdAt']
        read_only_fields = fields
