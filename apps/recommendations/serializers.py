from rest_framework import serializers
from apps.jobs.serializers import JobSerializer


class JobMatchSerializer(serializers.Serializer):
    job = JobSerializer(read_only=True)
    score = serializers.IntegerField(read_only=True)
    criteria = serializers.JSONField(read_only=True)
