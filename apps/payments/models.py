from django.db import models
from core.constants import PaymentStatus, PAYMENT_METHOD_CHOICES


class Payment(models.Model):
    job = models.OneToOneField('jobs.Job', on_delete=models.CASCADE, related_name='payment')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='Pending')
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Payment {self.amount} for {self.job.title} ({self.status})"

    @property
    def is_completed(self):
        return self.status == PaymentStatus.COMPLETED
