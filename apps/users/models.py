from django.db import models
from django.contrib.auth.models import AbstractUser
from django.db.models import Avg, Count
from django.utils.functional import cached_property

from core.constants import UserRole


class User(AbstractUser):
    auth_subject = models.CharField(max_length=255, unique=True, blank=True, null=True)
    email = models.EmailField(blank=True, null=True, unique=True)
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=10, choices=UserRole.choices, blank=True, null=True)
    profile_picture = models.CharField(max_length=500, blank=True, null=True)
    bio = models.TextField(blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_seeker(self):
        return self.role == UserRole.SEEKER

    @property
    def is_provider(self):
        return self.role == UserRole.PROVIDER

    @staticmethod
    def get_by_subject(subject):
        return User.objects.filter(auth_subject=subject).first()

    def get_rating_stats(self):
        """Average, count and percentage breakdown of the ratings this user received."""
        stats = {
            'average_rating': 0.0,
            'total_ratings': 0,
            'rating_breakdown': {
                '5_star': 0,
                '4_star': 0,
                '3_star': 0,
                '2_star': 0,
                '1_star': 0
            }
        }

        summary = self.ratings_received.aggregate(average=Avg('rating'), total=Count('id'))
        if not summary['total']:
            return stats

        stats['total_ratings'] = summary['total']
        stats['average_rating'] = round(summary['average'], 1)

        for row in self.ratings_received.values('rating').annotate(count=Count('id')):
            stats['rating_breakdown'][f"{row['rating']}_star"] = round(
                (row['count'] / summary['total']) * 100, 1
            )
        return stats

    def __str__(self):
        return f"{self.get_full_name() or self.username} ({self.role or 'unassigned'})"


class ProviderProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='provider_profile')
    birthday = models.DateField(blank=True, null=True)
    base_latitude = models.FloatField(blank=True, null=True)
    base_longitude = models.FloatField(blank=True, null=True)

    @cached_property
    def capabilities(self):
        """Map of category id to the attribute values this provider offers for it."""
        return {entry.category_id: dict(entry.attributes or {}) for entry in self.categories.all()}

    def __str__(self):
        return f"Provider: {self.user.username}"


class ProviderCategory(models.Model):
    provider = models.ForeignKey(ProviderProfile, on_delete=models.CASCADE, related_name='categories')
    category = models.ForeignKey('jobs.Category', on_delete=models.CASCADE, related_name='providers')
    attributes = models.JSONField(default=dict, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['provider', 'category'], name='unique_provider_category'),
        ]

    def __str__(self):
        return f"{self.provider.user.username} - {self.category.name}"
