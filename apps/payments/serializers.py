from rest_framework import serializers
from .models import Payment
from core.constants import PAYMENT_METHOD_CHOICES, PaymentStatus


class PaymentSerializer(serializers.ModelSerializer):
    jobId = serializers.IntegerField(source='job_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Payment
        fields = ['id', 'jobId', 'amount', 'method', 'status', 'createdAt', 'updatedAt']
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, required=False, default='Pending')


class PaymentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.choices)
    method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, required=False)
