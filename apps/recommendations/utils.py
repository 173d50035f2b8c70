import logging
import math

from apps.jobs.store import open_jobs_in_categories

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    Job/provider compatibility scoring.

    ``score`` only reads attributes of the job and provider it is given, so it can
    be used with model instances or any object carrying the same fields:

    - job: ``category_id``, ``attributes``, ``latitude``, ``longitude``
    - provider: ``capabilities`` ({category_id: {attribute: value}}),
      ``base_latitude``, ``base_longitude``
    """
    CATEGORY_WEIGHT = 30
    ATTRIBUTE_WEIGHT = 40
    PROXIMITY_WEIGHT = 30
    MAX_DISTANCE_KM = 50
    EARTH_RADIUS_KM = 6371

    @staticmethod
    def haversine_km(lat1, lng1, lat2, lng2):
        """Great-circle distance between two points in kilometres."""
        d_lat = math.radians(lat2 - lat1)
        d_lng = math.radians(lng2 - lng1)
        a = (
            math.sin(d_lat / 2) ** 2
            + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
        )
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return MatchEngine.EARTH_RADIUS_KM * c

    @staticmethod
    def provider_attributes(job, provider):
        capabilities = provider.capabilities or {}
        if job.category_id in capabilities:
            return capabilities[job.category_id] or {}
        merged = {}
        for attributes in capabilities.values():
            merged.update(attributes or {})
        return merged

    @classmethod
    def calculate_category_score(cls, job, provider):
        return cls.CATEGORY_WEIGHT if job.category_id in (provider.capabilities or {}) else 0

    @classmethod
    def calculate_attribute_score(cls, job, provider):
        required = job.attributes or {}
        if not required:
            return 0.0
        offered = cls.provider_attributes(job, provider)
        matched = sum(
            1 for name, value in required.items()
            if name in offered and str(offered[name]) == str(value)
        )
        return matched * (cls.ATTRIBUTE_WEIGHT / len(required))

    @classmethod
    def calculate_proximity_score(cls, job, provider):
        points = (job.latitude, job.longitude, provider.base_latitude, provider.base_longitude)
        if any(value is None for value in points):
            return 0.0
        distance = cls.haversine_km(*points)
        return max(0.0, cls.PROXIMITY_WEIGHT * (1 - distance / cls.MAX_DISTANCE_KM))

    @classmethod
    def score(cls, job, provider):
        """Compatibility score between 0 and 100."""
        total = (
            cls.calculate_category_score(job, provider)
            + cls.calculate_attribute_score(job, provider)
            + cls.calculate_proximity_score(job, provider)
        )
        return min(100, max(0, round(total)))

    @classmethod
    def criteria(cls, job, provider):
        return {
            'category': cls.calculate_category_score(job, provider),
            'attributes': round(cls.calculate_attribute_score(job, provider), 2),
            'proximity': round(cls.calculate_proximity_score(job, provider), 2),
        }

    @classmethod
    def rank_jobs(cls, jobs, provider):
        """Score jobs for a provider, best first; equal scores keep the incoming order."""
        results = []
        for job in jobs:
            results.append({
                'job': job,
                'score': cls.score(job, provider),
                'criteria': cls.criteria(job, provider),
            })
        return sorted(results, key=lambda x: x['score'], reverse=True)

    @classmethod
    def match_provider_to_jobs(cls, profile):
        """Open jobs in the provider's categories, ranked by score."""
        jobs = open_jobs_in_categories(list(profile.capabilities.keys()))
        results = cls.rank_jobs(jobs, profile)
        logger.info(f"Ranked {len(results)} open jobs for provider {profile.user_id}")
        return results
