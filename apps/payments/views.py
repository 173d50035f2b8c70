from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from apps.jobs.lifecycle import get_lifecycle
from .serializers import PaymentSerializer, PaymentCreateSerializer, PaymentUpdateSerializer
from . import ledger


class JobPaymentView(APIView):

    @swagger_auto_schema(
        operation_description="Create the payment for an in-progress job. The amount is the agreed amount, or the budget.",
        request_body=PaymentCreateSerializer,
        responses={
            201: PaymentSerializer,
            400: 'Payment already exists',
            404: 'Job not found',
            409: 'Job not in progress'
        }
    )
    def post(self, request, pk):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = ledger.create_payment(pk, method=serializer.validated_data['method'])
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="Whether a payment exists for the job and its status.",
        responses={
            200: openapi.Response('Payment status', openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'exists': openapi.Schema(type=openapi.TYPE_BOOLEAN),
                    'status': openapi.Schema(type=openapi.TYPE_STRING),
                }
            )),
            404: 'Job not found'
        }
    )
    def get(self, request, pk):
        return Response(ledger.get_payment_status(pk))

    @swagger_auto_schema(
        operation_description="Record a payment outcome: Pending to Completed or Failed, or Failed back to Pending.",
        request_body=PaymentUpdateSerializer,
        responses={
            200: PaymentSerializer,
            400: 'Bad Request',
            404: 'Payment not found',
            409: 'Transition not allowed'
        }
    )
    def patch(self, request, pk):
        serializer = PaymentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = get_lifecycle().record_payment(
            pk, serializer.validated_data['status'], serializer.validated_data.get('method')
        )
        return Response(PaymentSerializer(payment).data)
