from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from .models import Job, Bid, Category, Rating
from core.constants import JobStatus
from core.utils import point_as_geojson
from apps.locations.catalog import get_location
import logging

logger = logging.getLogger(__name__)
User = get_user_model()


class CategorySerializer(serializers.ModelSerializer):
    attributeSchema = serializers.JSONField(source='attribute_schema', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'attributeSchema', 'createdAt']

    def validate_attributeSchema(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("attributeSchema must be an object of attribute name to allowed values.")
        for name, allowed in value.items():
            if not isinstance(allowed, str):
                raise serializers.ValidationError(f"Allowed values for '{name}' must be a comma separated string.")
        return value


class JobSerializer(serializers.ModelSerializer):
    categoryId = serializers.IntegerField(source='category_id', read_only=True)
    categoryName = serializers.CharField(source='category_name', read_only=True)
    agreedAmount = serializers.DecimalField(source='agreed_amount', max_digits=12, decimal_places=2, read_only=True)
    seekerId = serializers.IntegerField(source='seeker_id', read_only=True)
    providerId = serializers.IntegerField(source='provider_id', read_only=True)
    location = serializers.SerializerMethodField()
    bidCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)

    class Meta:
        model = Job
        fields = [
            'id', 'title', 'description', 'categoryId', 'categoryName', 'attributes',
            'budget', 'agreedAmount', 'location', 'status', 'seekerId', 'providerId',
            'bidCount', 'createdAt', 'updatedAt', 'completedAt'
        ]
        read_only_fields = fields

    def get_location(self, obj):
        return point_as_geojson(obj.latitude, obj.longitude)

    def get_bidCount(self, obj):
        bid_count = getattr(obj, 'bid_count', None)
        if bid_count is None:
            bid_count = obj.bids.count()
        return bid_count


class JobCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField()
    categoryId = serializers.IntegerField()
    categoryName = serializers.CharField(max_length=100, required=False)
    category = serializers.CharField(max_length=100, required=False)
    budget = serializers.DecimalField(max_digits=12, decimal_places=2)
    location = serializers.JSONField(required=False)
    locationId = serializers.IntegerField(required=False)
    attributes = serializers.DictField(required=False, default=dict)
    seekerId = serializers.IntegerField(required=False)

    def validate(self, data):
        if not data.get('categoryName') and not data.get('category'):
            raise serializers.ValidationError({"categoryName": "This field is required."})
        if data.get('location') in (None, '', {}, []) and data.get('locationId') is None:
            raise serializers.ValidationError({"location": "Provide a location or a locationId."})
        return data

    def to_service_kwargs(self, requester=None):
        data = self.validated_data
        location = data.get('location')
        if location in (None, '', {}, []):
            location = get_location(data['locationId']).as_geojson()
        seeker_id = data.get('seekerId')
        if seeker_id is None and requester is not None and requester.is_authenticated:
            seeker_id = requester.id
        return {
            'seeker_id': seeker_id,
            'title': data['title'],
            'description': data['description'],
            'category_id': data['categoryId'],
            'category_name': data.get('categoryName') or data['category'],
            'budget': data['budget'],
            'location': location,
            'attributes': data.get('attributes') or {},
        }


class BidSerializer(serializers.ModelSerializer):
    jobId = serializers.IntegerField(source='job_id', read_only=True)
    providerId = serializers.IntegerField(source='provider_id', read_only=True)
    seekerId = serializers.IntegerField(source='seeker_id', read_only=True)
    provider = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Bid
        fields = ['id', 'jobId', 'providerId', 'seekerId', 'amount', 'status', 'provider', 'createdAt', 'updatedAt']
        read_only_fields = fields

    def get_provider(self, obj):
        user = obj.provider
        return {
            'id': user.id,
            'name': user.get_full_name() or user.username,
            'profilePicture': user.profile_picture,
        }


class BidCreateSerializer(serializers.Serializer):
    providerId = serializers.IntegerField(required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Bid amount must be greater than zero.")
        return value


class JobStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=JobStatus.choices)


class RatingSerializer(serializers.ModelSerializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    userId = serializers.PrimaryKeyRelatedField(source='user', queryset=User.objects.all())
    jobId = serializers.PrimaryKeyRelatedField(source='job', queryset=Job.objects.all())
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Rating
        fields = ['id', 'rating', 'feedback', 'userId', 'jobId', 'createdAt']
        # uniqueness is checked in validate() so the message stays readable
        validators = []

    def validate(self, data):
        job = data['job']
        user = data['user']
        if job.status != JobStatus.COMPLETED:
            raise serializers.ValidationError("Only completed jobs can be rated.")
        if user.id not in (job.seeker_id, job.provider_id):
            raise serializers.ValidationError("The rated user did not take part in this job.")
        if Rating.objects.filter(job=job, user=user).exists():
            raise serializers.ValidationError("This user has already been rated for this job.")
        return data

    def create(self, validated_data):
        try:
            with transaction.atomic():
                rating = super().create(validated_data)
        except IntegrityError:
            raise serializers.ValidationError("This user has already been rated for this job.")
        logger.info(f"User {rating.user_id} rated {rating.rating}/5 for job {rating.job_id}")
        return rating
