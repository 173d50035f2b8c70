from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from .models import Category, Rating
from .serializers import (
    CategorySerializer, JobSerializer, JobCreateSerializer, BidSerializer,
    BidCreateSerializer, JobStatusUpdateSerializer, RatingSerializer
)
from .lifecycle import get_lifecycle
from . import bids, store
from core.utils import IsAdmin
import logging

logger = logging.getLogger(__name__)


def _requester_id(request, field, data=None):
    data = request.data if data is None else data
    value = data.get(field)
    if value is None and request.user.is_authenticated:
        value = request.user.id
    return value


class JobListCreateView(APIView):

    @swagger_auto_schema(
        operation_description="Post a new job. Providers registered for the category are notified.",
        request_body=JobCreateSerializer,
        responses={
            201: JobSerializer,
            400: 'Bad Request',
            404: 'Seeker or category not found'
        }
    )
    def post(self, request):
        serializer = JobCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job = get_lifecycle().post_job(**serializer.to_service_kwargs(request.user))
        return Response(JobSerializer(job).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="List jobs, newest first.",
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter('category', openapi.IN_QUERY, description='Category id or name', type=openapi.TYPE_STRING),
            openapi.Parameter('seekerId', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter('providerId', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        ],
        responses={200: JobSerializer(many=True), 400: 'Unknown status'}
    )
    def get(self, request):
        params = request.query_params
        jobs = store.list_jobs(
            status=params.get('status'),
            category=params.get('category'),
            seeker_id=params.get('seekerId') or params.get('requesterId'),
            provider_id=params.get('providerId'),
        )
        return Response(JobSerializer(jobs, many=True).data)


class JobDetailView(APIView):

    @swagger_auto_schema(
        operation_description="Retrieve a job.",
        responses={200: JobSerializer, 404: 'Not Found'}
    )
    def get(self, request, pk):
        job = store.get_job(pk)
        return Response(JobSerializer(job).data)


class JobBidsView(APIView):

    @swagger_auto_schema(
        operation_description="Place a bid on an open job.",
        request_body=BidCreateSerializer,
        responses={
            201: BidSerializer,
            400: 'Bad Request',
            404: 'Job or provider not found',
            409: 'Job not open or bid already placed'
        }
    )
    def post(self, request, pk):
        serializer = BidCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        provider_id = _requester_id(request, 'providerId', serializer.validated_data)
        bid = get_lifecycle().place_bid(pk, provider_id, serializer.validated_data['amount'])
        return Response(BidSerializer(bid).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="List the bids on a job, newest first.",
        responses={200: BidSerializer(many=True), 404: 'Not Found'}
    )
    def get(self, request, pk):
        return Response(BidSerializer(bids.list_bids_for_job(pk), many=True).data)


class BidWithdrawView(APIView):

    @swagger_auto_schema(
        operation_description="Withdraw a provider's pending bid on a job.",
        responses={200: 'Bid withdrawn', 404: 'Bid not found', 409: 'Bid no longer pending'}
    )
    def delete(self, request, job_id, provider_id):
        bid = get_lifecycle().withdraw_bid(job_id, provider_id)
        return Response({"message": "Bid withdrawn", "bidId": bid.id})


class BidAcceptView(APIView):

    @swagger_auto_schema(
        operation_description="Accept a bid. The job moves to In Progress and all other bids are rejected.",
        responses={
            200: openapi.Response('Job and accepted bid', openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'job': openapi.Schema(type=openapi.TYPE_OBJECT),
                    'bid': openapi.Schema(type=openapi.TYPE_OBJECT),
                }
            )),
            404: 'Bid not found',
            409: 'Job not open or bid not pending'
        }
    )
    def post(self, request, pk):
        job, bid = get_lifecycle().accept_bid(pk)
        return Response({'job': JobSerializer(job).data, 'bid': BidSerializer(bid).data})


class BidRejectView(APIView):

    @swagger_auto_schema(
        operation_description="Reject a pending bid. The job stays open.",
        responses={200: BidSerializer, 404: 'Bid not found', 409: 'Bid not pending'}
    )
    def post(self, request, pk):
        bid = get_lifecycle().reject_bid(pk)
        return Response(BidSerializer(bid).data)


class JobCompleteView(APIView):

    @swagger_auto_schema(
        operation_description="Mark an in-progress job as completed. Requires a completed payment.",
        responses={
            200: JobSerializer,
            400: 'Payment missing or not completed',
            404: 'Not Found',
            409: 'Job not in progress'
        }
    )
    def post(self, request, pk):
        job = get_lifecycle().complete_job(pk)
        return Response(JobSerializer(job).data)


class JobCancelView(APIView):

    @swagger_auto_schema(
        operation_description="Cancel an open or in-progress job.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={'requesterId': openapi.Schema(type=openapi.TYPE_INTEGER)}
        ),
        responses={200: JobSerializer, 400: 'Not the job owner', 404: 'Not Found', 409: 'Job already closed'}
    )
    def post(self, request, pk):
        job = get_lifecycle().cancel_job(pk, requester_id=_requester_id(request, 'requesterId'))
        return Response(JobSerializer(job).data)


class JobStatusUpdateView(APIView):
    permission_classes = [IsAdmin]

    @swagger_auto_schema(
        operation_description="Change a job's status (admin only). Bound by the same transition rules as other actions.",
        request_body=JobStatusUpdateSerializer,
        responses={
            200: JobSerializer,
            400: 'Bad Request',
            403: 'Forbidden',
            404: 'Not Found',
            409: 'Transition not allowed'
        }
    )
    def put(self, request, pk):
        serializer = JobStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job = get_lifecycle().change_status(pk, serializer.validated_data['status'])
        return Response(JobSerializer(job).data)


class ProviderBidsView(APIView):

    @swagger_auto_schema(
        operation_description="List a provider's bids, newest first.",
        responses={200: BidSerializer(many=True)}
    )
    def get(self, request, provider_id):
        return Response(BidSerializer(bids.list_bids_for_provider(provider_id), many=True).data)


class ProviderHistoryView(APIView):

    @swagger_auto_schema(
        operation_description="Jobs assigned to a provider: in progress, completed or cancelled.",
        responses={200: JobSerializer(many=True)}
    )
    def get(self, request, provider_id):
        return Response(JobSerializer(store.provider_history(provider_id), many=True).data)


class CategoryListCreateView(APIView):

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return super().get_permissions()

    @swagger_auto_schema(
        operation_description="Create a job category (admin only).",
        request_body=CategorySerializer,
        responses={201: CategorySerializer, 400: 'Bad Request', 403: 'Forbidden'}
    )
    def post(self, request):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        logger.info(f"Category {category.id} '{category.name}' created")
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="List job categories.",
        responses={200: CategorySerializer(many=True)}
    )
    def get(self, request):
        return Response(CategorySerializer(Category.objects.all(), many=True).data)


class CategoryDetailView(APIView):

    @swagger_auto_schema(
        operation_description="Retrieve a job category.",
        responses={200: CategorySerializer, 404: 'Not Found'}
    )
    def get(self, request, pk):
        try:
            category = Category.objects.get(pk=pk)
        except Category.DoesNotExist:
            return Response({"error": "Category not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(CategorySerializer(category).data)


class RatingListCreateView(APIView):

    @swagger_auto_schema(
        operation_description="Rate the seeker or provider of a completed job.",
        request_body=RatingSerializer,
        responses={201: RatingSerializer, 400: 'Bad Request'}
    )
    def post(self, request):
        serializer = RatingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_description="List ratings, optionally for one rated user.",
        manual_parameters=[openapi.Parameter('userId', openapi.IN_QUERY, type=openapi.TYPE_INTEGER)],
        responses={200: RatingSerializer(many=True)}
    )
    def get(self, request):
        ratings = Rating.objects.all()
        user_id = request.query_params.get('userId')
        if user_id:
            if not str(user_id).isdigit():
                return Response({"error": "userId must be a number"}, status=status.HTTP_400_BAD_REQUEST)
            ratings = ratings.filter(user_id=user_id)
        return Response(RatingSerializer(ratings, many=True).data)


class RatingDetailView(APIView):

    @swagger_auto_schema(
        operation_description="Retrieve a rating.",
        responses={200: RatingSerializer, 404: 'Not Found'}
    )
    def get(self, request, pk):
        try:
            rating = Rating.objects.get(pk=pk)
        except Rating.DoesNotExist:
            return Response({"error": "Rating not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(RatingSerializer(rating).data)
