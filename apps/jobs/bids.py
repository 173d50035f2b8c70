"""
Bid Ledger.

Duplicate bids are stopped by the (job, provider) unique constraint rather than
a lookup before insert; every status write is conditional on the bid still
being Pending.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.constants import BidStatus, JobStatus
from core.exceptions import InvalidState, NotFound, ValidationError
from .models import Bid, Job
from .store import as_amount, get_job

logger = logging.getLogger(__name__)
User = get_user_model()


def get_bid(bid_id):
    try:
        return Bid.objects.select_related('job', 'provider').get(pk=bid_id)
    except (Bid.DoesNotExist, ValueError, TypeError):
        raise NotFound("Bid not found")


def place_bid(job_id, provider_id, amount):
    amount = as_amount(amount)

    with transaction.atomic():
        # the provider row serializes this provider's concurrent bids across jobs
        try:
            provider = User.objects.select_for_update().get(pk=provider_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound("Provider not found")
        if not provider.is_provider:
            raise ValidationError("Only providers can place bids")

        try:
            job = Job.objects.select_for_update().get(pk=job_id)
        except (Job.DoesNotExist, ValueError, TypeError):
            raise NotFound("Job not found")
        if job.status != JobStatus.OPEN:
            raise InvalidState(f"Cannot bid on a job that is {job.status}")

        if settings.MARKETPLACE['SINGLE_OUTSTANDING_BID']:
            outstanding = Bid.objects.filter(provider=provider, status=BidStatus.PENDING).exclude(job=job)
            if outstanding.exists():
                raise InvalidState("You already have an outstanding bid on another job")

        try:
            with transaction.atomic():
                bid = Bid.objects.create(job=job, provider=provider, seeker_id=job.seeker_id, amount=amount)
        except IntegrityError:
            raise InvalidState("You have already placed a bid on this job")

    logger.info(f"Provider {provider.id} bid {amount} on job {job.id}")
    return bid


def list_bids_for_job(job_id):
    job = get_job(job_id)
    return job.bids.select_related('provider', 'provider__provider_profile').order_by('-created_at', '-id')


def list_bids_for_provider(provider_id):
    return Bid.objects.select_related('job').filter(provider_id=provider_id).order_by('-created_at', '-id')


def settle_bids(job_id, accepted_bid_id):
    """
    Mark the winning bid Accepted and every other bid on the job Rejected.

    Must run inside the transaction that moves the job to In Progress.
    Returns the ids of the providers whose bids were rejected.
    """
    now = timezone.now()
    accepted = Bid.objects.filter(pk=accepted_bid_id, status=BidStatus.PENDING).update(
        status=BidStatus.ACCEPTED, updated_at=now
    )
    if not accepted:
        raise InvalidState("Bid is no longer pending")
    losing = Bid.objects.filter(job_id=job_id).exclude(pk=accepted_bid_id).exclude(status=BidStatus.REJECTED)
    rejected_providers = list(losing.values_list('provider_id', flat=True))
    losing.update(status=BidStatus.REJECTED, updated_at=now)
    return rejected_providers


def reject_pending_bids(job_id):
    pending = Bid.objects.filter(job_id=job_id, status=BidStatus.PENDING)
    provider_ids = list(pending.values_list('provider_id', flat=True))
    pending.update(status=BidStatus.REJECTED, updated_at=timezone.now())
    return provider_ids


def reject_bid(bid_id):
    bid = get_bid(bid_id)
    if bid.status != BidStatus.PENDING:
        raise InvalidState(f"Bid has already been {bid.status.lower()}")
    updated = Bid.objects.filter(pk=bid.pk, status=BidStatus.PENDING).update(
        status=BidStatus.REJECTED, updated_at=timezone.now()
    )
    if not updated:
        raise InvalidState("Bid is no longer pending")
    bid.refresh_from_db()
    logger.info(f"Bid {bid.id} on job {bid.job_id} rejected")
    return bid


def withdraw_bid(job_id, provider_id):
    bid = Bid.objects.select_related('job').filter(job_id=job_id, provider_id=provider_id).first()
    if bid is None:
        raise NotFound("Bid not found")
    if bid.status != BidStatus.PENDING:
        raise InvalidState(f"Cannot withdraw a bid that has been {bid.status.lower()}")
    deleted, _ = Bid.objects.filter(pk=bid.pk, status=BidStatus.PENDING).delete()
    if not deleted:
        raise InvalidState("Bid is no longer pending")
    logger.info(f"Provider {provider_id} withdrew bid on job {job_id}")
    return bid
