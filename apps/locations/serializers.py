from rest_framework import serializers
from core.utils import parse_point
from .models import Location


class LocationSerializer(serializers.ModelSerializer):
    coordinates = serializers.JSONField(write_only=True)

    class Meta:
        model = Location
        fields = ['id', 'name', 'coordinates']

    def validate_coordinates(self, value):
        try:
            return parse_point(value)
        except (TypeError, ValueError) as e:
            raise serializers.ValidationError(f"Invalid location: {str(e)}")

    def create(self, validated_data):
        latitude, longitude = validated_data.pop('coordinates')
        return Location.objects.create(latitude=latitude, longitude=longitude, **validated_data)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['coordinates'] = instance.as_geojson()
        return data
