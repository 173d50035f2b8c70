from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django.contrib.auth import get_user_model
from .serializers import UserSerializer, UserCreateSerializer, ProviderPreferencesSerializer
from .models import ProviderProfile
from .dashboard import dashboard_for
import logging

User = get_user_model()
logger = logging.getLogger(__name__)


class UserCreateView(APIView):

    @swagger_auto_schema(
        operation_description="Complete sign-up for an identity coming from the external auth provider.",
        request_body=UserCreateSerializer,
        responses={201: UserSerializer, 400: 'Bad Request'}
    )
    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(APIView):

    @swagger_auto_schema(
        operation_description="Retrieve a user with provider preferences and rating statistics.",
        responses={200: UserSerializer, 404: 'Not Found'}
    )
    def get(self, request, pk):
        try:
            user = User.objects.get(pk=pk)
        except User.DoesNotExist:
            return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(UserSerializer(user).data)


class UserBySubjectView(APIView):

    @swagger_auto_schema(
        operation_description="Look a user up by their external auth subject id.",
        responses={200: UserSerializer, 404: 'Not Found'}
    )
    def get(self, request, subject):
        user = User.get_by_subject(subject)
        if user is None:
            return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(UserSerializer(user).data)


class ProviderPreferencesView(APIView):

    @swagger_auto_schema(
        operation_description="Set a provider's base location and the categories and attributes they offer.",
        request_body=ProviderPreferencesSerializer,
        responses={200: UserSerializer, 400: 'Bad Request', 404: 'Not Found'}
    )
    def put(self, request, pk):
        try:
            user = User.objects.get(pk=pk)
        except User.DoesNotExist:
            return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
        if not user.is_provider:
            return Response({"error": "Only providers have preferences"}, status=status.HTTP_400_BAD_REQUEST)

        profile, _ = ProviderProfile.objects.get_or_create(user=user)
        serializer = ProviderPreferencesSerializer(profile, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(UserSerializer(user).data)


class UserDashboardView(APIView):

    @swagger_auto_schema(
        operation_description="Activity summary for a seeker or provider.",
        responses={
            200: openapi.Response(
                description='Seeker: openJobs, inProgressJobs, completedJobs, bidsReceived. '
                            'Provider: activeBids, jobsWon, jobsAttempted, completedJobs, amountEarned, lastCompletedAt. '
                            'Both: unreadNotifications.',
                schema=openapi.Schema(type=openapi.TYPE_OBJECT)
            ),
            404: 'Not Found'
        }
    )
    def get(self, request, pk):
        try:
            user = User.objects.get(pk=pk)
        except User.DoesNotExist:
            return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(dashboard_for(user))
