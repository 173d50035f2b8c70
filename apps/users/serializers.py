from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.db import transaction
from .models import ProviderProfile, ProviderCategory
from apps.jobs.models import Category
from apps.jobs.store import clean_attributes
from apps.locations.models import Location
from core.constants import UserRole
from core.exceptions import MarketplaceError
from core.utils import parse_point, point_as_geojson
import uuid
import logging

User = get_user_model()
logger = logging.getLogger(__name__)


class UserSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)
    phoneNumber = serializers.CharField(source='phone_number', read_only=True)
    profilePicture = serializers.CharField(source='profile_picture', read_only=True)
    authSubject = serializers.CharField(source='auth_subject', read_only=True)
    preferences = serializers.SerializerMethodField()
    ratingStats = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'firstName', 'lastName', 'email', 'phoneNumber',
            'role', 'profilePicture', 'bio', 'authSubject', 'preferences', 'ratingStats'
        ]
        read_only_fields = fields

    def get_preferences(self, obj):
        if not obj.is_provider:
            return None
        try:
            profile = obj.provider_profile
        except ProviderProfile.DoesNotExist:
            return None
        return {
            'location': point_as_geojson(profile.base_latitude, profile.base_longitude),
            'categories': [
                {'categoryId': entry.category_id, 'categoryName': entry.category.name, 'attributes': entry.attributes}
                for entry in profile.categories.select_related('category')
            ],
        }

    def get_ratingStats(self, obj):
        return obj.get_rating_stats()


class UserCreateSerializer(serializers.Serializer):
    authSubject = serializers.CharField(max_length=255, required=False)
    username = serializers.CharField(max_length=150, required=False)
    firstName = serializers.CharField(max_length=150, required=False, default='')
    lastName = serializers.CharField(max_length=150, required=False, default='')
    email = serializers.EmailField(required=False)
    phoneNumber = serializers.CharField(max_length=20, required=False)
    role = serializers.ChoiceField(choices=UserRole.choices)
    profilePicture = serializers.CharField(max_length=500, required=False)
    bio = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        subject = data.get('authSubject')
        if subject and User.objects.filter(auth_subject=subject).exists():
            raise serializers.ValidationError({"authSubject": "A user with this subject already exists."})
        email = data.get('email')
        if email and User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError({"email": "Email already in use."})
        username = data.get('username')
        if username and User.objects.filter(username=username).exists():
            raise serializers.ValidationError({"username": "Username already taken."})
        return data

    def create(self, validated_data):
        username = validated_data.get('username') or f"user_{uuid.uuid4().hex[:10]}"
        with transaction.atomic():
            user = User.objects.create(
                username=username,
                auth_subject=validated_data.get('authSubject'),
                first_name=validated_data.get('firstName', ''),
                last_name=validated_data.get('lastName', ''),
                email=validated_data.get('email'),
                phone_number=validated_data.get('phoneNumber'),
                role=validated_data['role'],
                profile_picture=validated_data.get('profilePicture'),
                bio=validated_data.get('bio'),
            )
            user.set_unusable_password()
            user.save(update_fields=['password'])
            if user.is_provider:
                ProviderProfile.objects.create(user=user)
        logger.info(f"Created {user.role} user {user.id}")
        return user


class CapabilitySerializer(serializers.Serializer):
    categoryId = serializers.IntegerField()
    attributes = serializers.DictField(required=False, default=dict)


class ProviderPreferencesSerializer(serializers.Serializer):
    location = serializers.JSONField(required=False)
    locationId = serializers.IntegerField(required=False)
    categories = CapabilitySerializer(many=True, required=False)

    def validate_location(self, value):
        try:
            return parse_point(value)
        except (TypeError, ValueError) as e:
            raise serializers.ValidationError(f"Invalid location: {str(e)}")

    def validate_categories(self, value):
        cleaned = []
        seen = set()
        for entry in value:
            category_id = entry['categoryId']
            if category_id in seen:
                raise serializers.ValidationError(f"Category {category_id} is listed more than once.")
            seen.add(category_id)
            try:
                category = Category.objects.get(pk=category_id)
            except Category.DoesNotExist:
                raise serializers.ValidationError(f"Category {category_id} not found.")
            try:
                attributes = clean_attributes(category, entry.get('attributes') or {})
            except MarketplaceError as e:
                raise serializers.ValidationError(e.message)
            cleaned.append((category, attributes))
        return cleaned

    def validate(self, data):
        location_id = data.pop('locationId', None)
        if location_id is not None and 'location' not in data:
            try:
                data['location'] = Location.objects.get(pk=location_id).point
            except Location.DoesNotExist:
                raise serializers.ValidationError({"locationId": "Location not found."})
        return data

    def update(self, profile, validated_data):
        with transaction.atomic():
            if 'location' in validated_data:
                profile.base_latitude, profile.base_longitude = validated_data['location']
                profile.save(update_fields=['base_latitude', 'base_longitude'])
            if 'categories' in validated_data:
                profile.categories.all().delete()
                ProviderCategory.objects.bulk_create([
                    ProviderCategory(provider=profile, category=category, attributes=attributes)
                    for category, attributes in validated_data['categories']
                ])
        logger.info(f"Updated preferences for provider {profile.user_id}")
        return profile
