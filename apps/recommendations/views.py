from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from apps.jobs.store import get_job
from apps.users.models import ProviderProfile
from .serializers import JobMatchSerializer
from .utils import MatchEngine
import logging

logger = logging.getLogger(__name__)


def _provider_profile(provider_id):
    try:
        return ProviderProfile.objects.select_related('user').get(user_id=provider_id)
    except ProviderProfile.DoesNotExist:
        return None


class JobMatchScoreView(APIView):

    @swagger_auto_schema(
        operation_description="Compatibility score (0-100) between a job and a provider.",
        responses={
            200: openapi.Response('Score', openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'score': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'criteria': openapi.Schema(type=openapi.TYPE_OBJECT),
                }
            )),
            404: 'Job or provider not found'
        }
    )
    def get(self, request, job_id, provider_id):
        job = get_job(job_id)
        profile = _provider_profile(provider_id)
        if profile is None:
            logger.error(f"Provider {provider_id} not found for match on job {job_id}.")
            return Response({"error": "Provider not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response({
            'score': MatchEngine.score(job, profile),
            'criteria': MatchEngine.criteria(job, profile),
        })


class ProviderJobRecommendationView(APIView):

    @swagger_auto_schema(
        operation_description="Open jobs in the provider's categories, best match first.",
        responses={200: JobMatchSerializer(many=True), 404: 'Provider not found'}
    )
    def get(self, request, provider_id):
        profile = _provider_profile(provider_id)
        if profile is None:
            return Response({"error": "Provider not found"}, status=status.HTTP_404_NOT_FOUND)
        results = MatchEngine.match_provider_to_jobs(profile)
        return Response(JobMatchSerializer(results, many=True).data)
