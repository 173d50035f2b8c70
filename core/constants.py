# core/constants.py
from django.db import models


class UserRole(models.TextChoices):
    SEEKER = 'Seeker', 'Seeker'         # Posts jobs
    PROVIDER = 'Provider', 'Provider'   # Bids on and performs jobs


class JobStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'              # Reserved, no transition reaches it
    OPEN = 'Open', 'Open'                       # Initial state, accepting bids
    IN_PROGRESS = 'In Progress', 'In Progress'  # A bid was accepted, provider assigned
    COMPLETED = 'Completed', 'Completed'        # Paid and done
    CANCELLED = 'Cancelled', 'Cancelled'        # Withdrawn by the seeker or an admin


VALID_JOB_TRANSITIONS = {
    JobStatus.PENDING: set(),
    JobStatus.OPEN: {JobStatus.IN_PROGRESS, JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED, JobStatus.CANCELLED},
    JobStatus.COMPLETED: set(),
    JobStatus.CANCELLED: set(),
}

PROVIDER_HISTORY_STATUSES = (JobStatus.IN_PROGRESS, JobStatus.COMPLETED, JobStatus.CANCELLED)


class BidStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'      # Provider bid, awaiting seeker response
    ACCEPTED = 'Accepted', 'Accepted'   # Seeker accepted the bid
    REJECTED = 'Rejected', 'Rejected'   # Seeker rejected it, or another bid won


class PaymentStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    COMPLETED = 'Completed', 'Completed'
    FAILED = 'Failed', 'Failed'


PAYMENT_METHOD_CHOICES = (
    ('Pending', 'Pending'),
    ('Cash', 'Cash'),
    ('Credit Card', 'Credit Card'),
    ('Mobile Money', 'Mobile Money'),
)

VALID_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING},
    PaymentStatus.COMPLETED: set(),
}

NOTIFICATION_TYPE_CHOICES = (
    ('new_job', 'New Job'),
    ('new_bid', 'New Bid'),
    ('bid_accepted', 'Bid Accepted'),
    ('bid_rejected', 'Bid Rejected'),
    ('bid_withdrawn', 'Bid Withdrawn'),
    ('job_status_changed', 'Job Status Changed'),
    ('job_cancelled', 'Job Cancelled'),
    ('job_completed', 'Job Completed'),
    ('payment_updated', 'Payment Updated'),
    ('system', 'System'),
)
