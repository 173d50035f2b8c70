"""Payment Ledger: one payment per job, gating job completion."""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.constants import JobStatus, PaymentStatus, PAYMENT_METHOD_CHOICES, VALID_PAYMENT_TRANSITIONS
from core.exceptions import InvalidState, NotFound, ValidationError
from apps.jobs.store import get_job
from .models import Payment

logger = logging.getLogger(__name__)

PAYMENT_METHODS = [choice for choice, _ in PAYMENT_METHOD_CHOICES]


def _check_method(method):
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method '{method}'")
    return method


def create_payment(job_id, method='Pending'):
    job = get_job(job_id)
    _check_method(method)
    if job.status != JobStatus.IN_PROGRESS:
        raise InvalidState(f"Cannot create a payment for a job that is {job.status}")
    try:
        with transaction.atomic():
            payment = Payment.objects.create(job=job, amount=job.payable_amount, method=method)
    except IntegrityError:
        raise ValidationError("Payment already exists for this job")
    logger.info(f"Created payment {payment.id} of {payment.amount} for job {job.id}")
    return payment


def get_payment(job_id):
    return Payment.objects.filter(job_id=job_id).first()


def get_payment_status(job_id):
    get_job(job_id)
    payment = get_payment(job_id)
    if payment is None:
        return {'exists': False}
    return {'exists': True, 'status': payment.status}


def record_payment(job_id, status, method=None):
    """Move a payment along Pending -> Completed | Failed, or Failed -> Pending for a retry."""
    payment = get_payment(job_id)
    if payment is None:
        raise NotFound("No payment found for this job")
    try:
        target = PaymentStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown payment status '{status}'")
    if method is not None:
        _check_method(method)

    current = PaymentStatus(payment.status)
    if target not in VALID_PAYMENT_TRANSITIONS[current]:
        raise InvalidState(f"Cannot move payment from {current.label} to {target.label}")

    method = method or payment.method
    if target == PaymentStatus.COMPLETED and method == 'Pending':
        raise ValidationError("A payment method is required to complete a payment")

    updated = Payment.objects.filter(pk=payment.pk, status=current).update(
        status=target, method=method, updated_at=timezone.now()
    )
    if not updated:
        raise InvalidState("Payment was updated concurrently")
    payment.refresh_from_db()
    logger.info(f"Payment {payment.id} for job {job_id} is now {payment.status}")
    return payment
