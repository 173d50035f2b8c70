from django.db import models
from django.conf import settings
from core.constants import JobStatus, BidStatus


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField()
    # attribute name -> comma separated allowed values, e.g. {"pipe_type": "PVC,Copper"}
    attribute_schema = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'Categories'
        ordering = ['name']

    def __str__(self):
        return self.name

    def allowed_values(self, attribute):
        """Allowed values for an attribute, or None when the schema does not name it."""
        raw = (self.attribute_schema or {}).get(attribute)
        if raw is None:
            return None
        return [value.strip() for value in str(raw).split(',') if value.strip()]


class Job(models.Model):
    seeker = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='jobs')
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_jobs'
    )
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='jobs')
    category_name = models.CharField(max_length=100)
    attributes = models.JSONField(default=dict, blank=True)
    budget = models.DecimalField(max_digits=12, decimal_places=2)
    agreed_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    latitude = models.FloatField()
    longitude = models.FloatField()
    status = models.CharField(max_length=20, choices=JobStatus.choices, default=JobStatus.OPEN)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status', 'category']),
            models.Index(fields=['seeker', 'status']),
            models.Index(fields=['provider', 'status']),
        ]

    def __str__(self):
        return f"{self.title} - {self.status}"

    @property
    def payable_amount(self):
        return self.agreed_amount if self.agreed_amount is not None else self.budget


class Bid(models.Model):
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='bids')
    provider = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='bids')
    seeker = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='bids_received')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=BidStatus.choices, default=BidStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['job', 'provider'], name='unique_bid_per_provider'),
        ]

    def __str__(self):
        return f"Bid {self.amount} by {self.provider.username} on {self.job.title}"


class Rating(models.Model):
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='ratings')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='ratings_received')
    rating = models.IntegerField(choices=[(i, i) for i in range(1, 6)])  # 1 to 5 stars
    feedback = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['job', 'user'], name='unique_rating_per_job_user'),
        ]

    def __str__(self):
        return f"Rating for {self.user.username} on {self.job.title} ({self.rating}/5)"
