from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from .outbox import get_outbox
from .serializers import NotificationSerializer


class UserNotificationsView(APIView):

    @swagger_auto_schema(
        operation_description="A user's notifications, newest first.",
        manual_parameters=[
            openapi.Parameter('limit', openapi.IN_QUERY, description='Defaults to 50', type=openapi.TYPE_INTEGER)
        ],
        responses={200: NotificationSerializer(many=True), 400: 'Bad Request'}
    )
    def get(self, request, user_id):
        limit = request.query_params.get('limit')
        if limit is not None:
            if not limit.isdigit() or int(limit) < 1:
                return Response({"error": "limit must be a positive integer"}, status=status.HTTP_400_BAD_REQUEST)
            limit = int(limit)
        notifications = get_outbox().list_for_user(user_id, limit)
        return Response(NotificationSerializer(notifications, many=True).data)


class NotificationReadView(APIView):

    @swagger_auto_schema(
        operation_description="Mark one notification as read.",
        responses={200: NotificationSerializer, 404: 'Not Found'}
    )
    def patch(self, request, pk):
        notification = get_outbox().mark_read(pk)
        return Response(NotificationSerializer(notification).data)


class NotificationReadAllView(APIView):

    @swagger_auto_schema(
        operation_description="Mark all of a user's notifications as read.",
        responses={200: openapi.Response('Number of notifications updated', openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={'updated': openapi.Schema(type=openapi.TYPE_INTEGER)}
        ))}
    )
    def patch(self, request, user_id):
        updated = get_outbox().mark_all_read(user_id)
        return Response({"updated": updated})
