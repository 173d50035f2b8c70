"""Per-role activity summaries shown on a user's dashboard."""
from decimal import Decimal

from django.db.models import Count, Max, Q, Sum

from core.constants import BidStatus, JobStatus, PaymentStatus
from apps.jobs.models import Bid, Job
from apps.notifications.outbox import get_outbox
from apps.payments.models import Payment


def seeker_dashboard(user):
    counts = Job.objects.filter(seeker=user).aggregate(
        open=Count('id', filter=Q(status=JobStatus.OPEN)),
        in_progress=Count('id', filter=Q(status=JobStatus.IN_PROGRESS)),
        completed=Count('id', filter=Q(status=JobStatus.COMPLETED)),
    )
    return {
        'openJobs': counts['open'],
        'inProgressJobs': counts['in_progress'],
        'completedJobs': counts['completed'],
        'bidsReceived': Bid.objects.filter(seeker=user).count(),
    }


def provider_dashboard(user):
    bid_counts = Bid.objects.filter(provider=user).aggregate(
        attempted=Count('id'),
        active=Count('id', filter=Q(status=BidStatus.PENDING)),
        won=Count('id', filter=Q(status=BidStatus.ACCEPTED)),
    )
    completed = Job.objects.filter(provider=user, status=JobStatus.COMPLETED).aggregate(
        total=Count('id'), last=Max('completed_at')
    )
    earned = Payment.objects.filter(
        job__provider=user, job__status=JobStatus.COMPLETED, status=PaymentStatus.COMPLETED
    ).aggregate(total=Sum('amount'))['total']
    return {
        'activeBids': bid_counts['active'],
        'jobsWon': bid_counts['won'],
        'jobsAttempted': bid_counts['attempted'],
        'completedJobs': completed['total'],
        'amountEarned': earned or Decimal('0.00'),
        'lastCompletedAt': completed['last'],
    }


def dashboard_for(user):
    board = provider_dashboard(user) if user.is_provider else seeker_dashboard(user)
    board['unreadNotifications'] = get_outbox().unread_count(user.id)
    return board
