"""
Job Lifecycle Controller.

``JobLifecycle.transition`` is the only code that writes ``Job.status``. It
checks the move against ``VALID_JOB_TRANSITIONS`` and applies it as a
compare-and-swap on the current status, so two requests racing on the same
job cannot both win.

Notifications are written after the state change has committed and pushed to
live clients once their own write commits. A failure to notify is logged and
never undoes the transition.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.constants import BidStatus, JobStatus, UserRole, VALID_JOB_TRANSITIONS
from core.exceptions import InvalidState, PreconditionFailed, ValidationError
from apps.notifications.outbox import get_outbox
from apps.payments import ledger
from . import bids, store
from .models import Job

logger = logging.getLogger(__name__)
User = get_user_model()


class JobLifecycle:

    def __init__(self, outbox):
        self.outbox = outbox

    @property
    def push(self):
        return self.outbox.push

    # -- state machine -------------------------------------------------

    def transition(self, job, target, **changes):
        source = JobStatus(job.status)
        target = JobStatus(target)
        if target not in VALID_JOB_TRANSITIONS[source]:
            raise InvalidState(f"Cannot move job from {source.label} to {target.label}")
        if target == JobStatus.IN_PROGRESS and not changes.get('provider_id'):
            raise InvalidState("A job can only start once a bid has been accepted")

        conditions = {'pk': job.pk, 'status': source}
        if target == JobStatus.IN_PROGRESS:
            conditions['provider__isnull'] = True
        updated = Job.objects.filter(**conditions).update(status=target, updated_at=timezone.now(), **changes)
        if not updated:
            raise InvalidState(f"Job is no longer {source.label}")

        job.refresh_from_db()
        logger.info(f"Job {job.id} moved from {source.label} to {target.label}")
        return job

    # -- jobs ----------------------------------------------------------

    def post_job(self, **fields):
        job = store.create_job(**fields)
        provider_ids = (
            User.objects.filter(role=UserRole.PROVIDER, provider_profile__categories__category_id=job.category_id)
            .values_list('id', flat=True)
            .distinct()
        )
        self._notify_many(
            provider_ids, 'new_job', 'New Job Available',
            f'New job available: "{job.title}" in {job.category_name}',
            {'jobId': job.id},
        )
        self._broadcast('jobAdded', {'jobId': job.id, 'category': job.category_name})
        return job

    def cancel_job(self, job_id, requester_id=None):
        job = store.get_job(job_id)
        if requester_id is not None and str(job.seeker_id) != str(requester_id):
            raise ValidationError("Only the seeker who posted the job can cancel it")
        source = job.status
        job, bidder_ids = self._cancel(job)

        if source == JobStatus.OPEN:
            self._notify_many(
                bidder_ids, 'job_cancelled', 'Job Cancelled',
                f'The job "{job.title}" you bid on has been cancelled',
                {'jobId': job.id},
            )
        elif job.provider_id:
            self._notify(
                job.provider_id, 'job_cancelled', 'Job Cancelled',
                f'The job "{job.title}" assigned to you has been cancelled',
                {'jobId': job.id},
            )
        self._push_status(job)
        return job

    def complete_job(self, job_id):
        job = store.get_job(job_id)
        job = self._complete(job)
        for user_id, message in (
            (job.seeker_id, f'Your job "{job.title}" has been completed'),
            (job.provider_id, f'Job "{job.title}" has been marked as completed'),
        ):
            self._notify(user_id, 'job_completed', 'Job Completed', message, {'jobId': job.id})
        self._push_status(job)
        return job

    def change_status(self, job_id, status):
        """Administrative status change, still bound by the transition table and its guards."""
        try:
            target = JobStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status '{status}'")
        job = store.get_job(job_id)
        source = job.status
        if target == source:
            raise InvalidState(f"Job is already {source}")

        bidder_ids = []
        if target == JobStatus.CANCELLED:
            job, bidder_ids = self._cancel(job)
        elif target == JobStatus.COMPLETED:
            job = self._complete(job)
        else:
            with transaction.atomic():
                job = self.transition(job, target)

        self._notify(
            job.seeker_id, 'job_status_changed', 'Job Status Updated',
            f'Your job "{job.title}" status changed to {job.status}', {'jobId': job.id, 'status': job.status},
        )
        if job.provider_id:
            self._notify(
                job.provider_id, 'job_status_changed', 'Job Status Updated',
                f'Job "{job.title}" status changed to {job.status}', {'jobId': job.id, 'status': job.status},
            )
        self._notify_many(
            bidder_ids, 'job_cancelled', 'Job Cancelled',
            f'The job "{job.title}" you bid on has been cancelled', {'jobId': job.id},
        )
        self._push_status(job)
        return job

    def _cancel(self, job):
        with transaction.atomic():
            source = job.status
            job = self.transition(job, JobStatus.CANCELLED)
            bidder_ids = bids.reject_pending_bids(job.id) if source == JobStatus.OPEN else []
        return job, bidder_ids

    def _complete(self, job):
        if job.status != JobStatus.IN_PROGRESS:
            raise InvalidState(f"Only jobs in progress can be completed; this job is {job.status}")
        payment = ledger.get_payment(job.id)
        if payment is None:
            raise PreconditionFailed("No payment found for this job")
        if not payment.is_completed:
            raise PreconditionFailed("Payment is not completed")
        with transaction.atomic():
            return self.transition(job, JobStatus.COMPLETED, completed_at=timezone.now())

    # -- bids ----------------------------------------------------------

    def place_bid(self, job_id, provider_id, amount):
        bid = bids.place_bid(job_id, provider_id, amount)
        job = bid.job
        self._notify(
            job.seeker_id, 'new_bid', f'New Bid for {job.title}',
            f'New bid of {bid.amount} received for job: {job.title}',
            {'jobId': job.id, 'bidId': bid.id, 'bidAmount': str(bid.amount)},
        )
        self._broadcast('bidAdded', {'jobId': job.id, 'bidId': bid.id})
        return bid

    def accept_bid(self, bid_id):
        with transaction.atomic():
            bid = bids.get_bid(bid_id)
            job = bid.job
            if job.status != JobStatus.OPEN:
                raise InvalidState(f"Cannot accept a bid on a job that is {job.status}")
            if bid.status != BidStatus.PENDING:
                raise InvalidState(f"Bid has already been {bid.status.lower()}")
            job = self.transition(
                job, JobStatus.IN_PROGRESS, provider_id=bid.provider_id, agreed_amount=bid.amount
            )
            rejected_ids = bids.settle_bids(job.id, bid.id)
        bid.refresh_from_db()

        self._notify(
            bid.provider_id, 'bid_accepted', 'Bid Accepted',
            f'Your bid of {bid.amount} for "{job.title}" has been accepted',
            {'jobId': job.id, 'bidId': bid.id, 'amount': str(bid.amount)},
        )
        self._notify(
            job.seeker_id, 'job_status_changed', 'Job Assigned',
            f'You accepted a bid of {bid.amount} for "{job.title}"; the job is now in progress',
            {'jobId': job.id, 'bidId': bid.id, 'providerId': bid.provider_id},
        )
        self._notify_many(
            rejected_ids, 'bid_rejected', 'Bid Not Selected',
            f'Another bid was accepted for "{job.title}"', {'jobId': job.id},
        )
        self._push_status(job)
        return job, bid

    def reject_bid(self, bid_id):
        bid = bids.reject_bid(bid_id)
        self._notify(
            bid.provider_id, 'bid_rejected', 'Bid Rejected',
            f'Your bid for "{bid.job.title}" was rejected', {'jobId': bid.job_id, 'bidId': bid.id},
        )
        return bid

    def withdraw_bid(self, job_id, provider_id):
        bid = bids.withdraw_bid(job_id, provider_id)
        self._notify(
            bid.seeker_id, 'bid_withdrawn', 'Bid Withdrawn',
            f'A provider withdrew their bid on "{bid.job.title}"', {'jobId': bid.job_id},
        )
        self._broadcast('bidDeleted', {'jobId': bid.job_id, 'bidId': bid.id})
        return bid

    # -- payments ------------------------------------------------------

    def record_payment(self, job_id, status, method=None):
        payment = ledger.record_payment(job_id, status, method)
        job = payment.job
        for user_id in (job.seeker_id, job.provider_id):
            self._notify(
                user_id, 'payment_updated', 'Payment Updated',
                f'Payment of {payment.amount} for "{job.title}" is {payment.status}',
                {'jobId': job.id, 'status': payment.status},
            )
        return payment

    # -- side effects --------------------------------------------------

    def _notify(self, user_id, type, title, message, data=None):
        if not user_id:
            return None
        try:
            with transaction.atomic():
                return self.outbox.notify(user_id, type, title, message, data)
        except Exception as e:
            logger.error(f"Failed to notify user {user_id} ({type}): {str(e)}")
            return None

    def _notify_many(self, user_ids, type, title, message, data=None):
        return [self._notify(user_id, type, title, message, data) for user_id in dict.fromkeys(user_ids)]

    def _broadcast(self, event, payload):
        transaction.on_commit(lambda: self.push.broadcast(event, payload))

    def _push_status(self, job):
        self._broadcast('jobStatusChanged', {'jobId': job.id, 'status': job.status})


def get_lifecycle():
    return JobLifecycle(get_outbox())
