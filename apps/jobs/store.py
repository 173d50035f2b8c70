"""
Job Store: persistence and reads for job postings.

``create_job`` is the only place that writes the denormalized category name.
Status changes never happen here; they belong to ``apps.jobs.lifecycle``.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Count

from core.constants import JobStatus, PROVIDER_HISTORY_STATUSES
from core.exceptions import NotFound, ValidationError
from core.utils import parse_point
from .models import Category, Job

logger = logging.getLogger(__name__)
User = get_user_model()

# money columns are DecimalField(max_digits=12, decimal_places=2)
MAX_AMOUNT = Decimal('1e10')
REQUIRED_JOB_FIELDS = ('title', 'description', 'category_id', 'category_name', 'budget', 'location', 'seeker_id')


def as_amount(value, field='amount'):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    try:
        amount = amount.quantize(Decimal('0.01'))
    except InvalidOperation:
        raise ValidationError(f"{field} is too large")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    if amount >= MAX_AMOUNT:
        raise ValidationError(f"{field} is too large")
    return amount


def _as_id(value, field):
    if not str(value).isdigit():
        raise ValidationError(f"{field} must be a numeric id")
    return int(value)


def clean_attributes(category, attributes):
    if not isinstance(attributes, dict):
        raise ValidationError("attributes must be an object")
    schema = category.attribute_schema or {}
    cleaned = {}
    for name, value in attributes.items():
        if value is None or value == '':
            continue
        value = str(value).strip()
        if schema:
            allowed = category.allowed_values(name)
            if allowed is None:
                raise ValidationError(f"'{name}' is not an attribute of {category.name}")
            if allowed and value not in allowed:
                raise ValidationError(f"'{value}' is not an allowed value for {name}")
        cleaned[name] = value
    return cleaned


def create_job(seeker_id=None, title=None, description=None, category_id=None, category_name=None,
               budget=None, location=None, attributes=None):
    provided = {
        'title': title, 'description': description, 'category_id': category_id,
        'category_name': category_name, 'budget': budget, 'location': location, 'seeker_id': seeker_id,
    }
    missing = [name for name in REQUIRED_JOB_FIELDS if provided[name] in (None, '', {}, [])]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    budget = as_amount(budget, 'budget')
    minimum = settings.MARKETPLACE['MIN_JOB_BUDGET']
    if budget < minimum:
        raise ValidationError(f"budget must be at least {minimum}")

    try:
        latitude, longitude = parse_point(location)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid location: {str(e)}")

    try:
        seeker = User.objects.get(pk=seeker_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("Seeker not found")
    if not seeker.is_seeker:
        raise ValidationError("Only seekers can post jobs")

    try:
        category = Category.objects.get(pk=category_id)
    except (Category.DoesNotExist, ValueError, TypeError):
        raise NotFound("Category not found")
    if str(category_name).strip().lower() != category.name.lower():
        raise ValidationError(f"Category name '{category_name}' does not match category {category.id}")

    job = Job.objects.create(
        seeker=seeker,
        title=str(title).strip(),
        description=str(description).strip(),
        category=category,
        category_name=category.name,
        attributes=clean_attributes(category, attributes or {}),
        budget=budget,
        latitude=latitude,
        longitude=longitude,
        status=JobStatus.OPEN,
    )
    logger.info(f"Seeker {seeker.id} posted job {job.id} in {category.name}")
    return job


def get_job(job_id):
    try:
        return Job.objects.select_related('category', 'seeker', 'provider').get(pk=job_id)
    except (Job.DoesNotExist, ValueError, TypeError):
        raise NotFound("Job not found")


def list_jobs(status=None, category=None, seeker_id=None, provider_id=None):
    jobs = Job.objects.select_related('category').annotate(bid_count=Count('bids'))
    if status:
        if status not in JobStatus.values:
            raise ValidationError(f"Unknown status '{status}'")
        jobs = jobs.filter(status=status)
    if category:
        if str(category).isdigit():
            jobs = jobs.filter(category_id=int(category))
        else:
            jobs = jobs.filter(category_name__iexact=category)
    if seeker_id:
        jobs = jobs.filter(seeker_id=_as_id(seeker_id, 'seekerId'))
    if provider_id:
        jobs = jobs.filter(provider_id=_as_id(provider_id, 'providerId'))
    return jobs.order_by('-created_at', '-id')


def provider_history(provider_id):
    """Jobs a provider has been assigned, most recently touched first."""
    return (
        Job.objects.select_related('category')
        .annotate(bid_count=Count('bids'))
        .filter(provider_id=provider_id, status__in=PROVIDER_HISTORY_STATUSES)
        .order_by('-updated_at', '-created_at')
    )


def open_jobs_in_categories(category_ids):
    return (
        Job.objects.select_related('category')
        .annotate(bid_count=Count('bids'))
        .filter(status=JobStatus.OPEN, category_id__in=category_ids)
        .order_by('-created_at', '-id')
    )
