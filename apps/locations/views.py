from django.db import IntegrityError, transaction
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from core.utils import IsAdmin
from .catalog import get_location
from .models import Location
from .serializers import LocationSerializer
import logging

logger = logging.getLogger(__name__)


class LocationListCreateView(APIView):

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return super().get_permissions()

    @swagger_auto_schema(
        operation_description="Add one location, or several at once with {\"locations\": [...]} (admin only).",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'name': openapi.Schema(type=openapi.TYPE_STRING),
                'coordinates': openapi.Schema(type=openapi.TYPE_OBJECT, description='GeoJSON point, {lat, lng} or [lng, lat]'),
                'locations': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_OBJECT)),
            }
        ),
        responses={201: LocationSerializer(many=True), 400: 'Bad Request', 403: 'Forbidden'}
    )
    def post(self, request):
        if isinstance(request.data, list):
            many, payload = True, request.data
        else:
            many = 'locations' in request.data
            payload = request.data['locations'] if many else request.data
        if many and not isinstance(payload, list):
            return Response({"error": "locations must be an array"}, status=status.HTTP_400_BAD_REQUEST)

        serializer = LocationSerializer(data=payload, many=many)
        serializer.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError:
            return Response({"error": "Location names must be unique"}, status=status.HTTP_400_BAD_REQUEST)
        logger.info(f"Added {len(payload) if many else 1} location(s)")
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="List named locations, alphabetically.",
        responses={200: LocationSerializer(many=True)}
    )
    def get(self, request):
        return Response(LocationSerializer(Location.objects.all(), many=True).data)


class LocationDetailView(APIView):

    @swagger_auto_schema(
        operation_description="Retrieve a named location.",
        responses={200: LocationSerializer, 404: 'Not Found'}
    )
    def get(self, request, pk):
        return Response(LocationSerializer(get_location(pk)).data)
