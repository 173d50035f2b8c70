from django.contrib import admin
from .models import User, ProviderProfile, ProviderCategory
from apps.jobs.models import Category, Job, Bid, Rating
from apps.payments.models import Payment
from apps.notifications.models import Notification
from apps.locations.models import Location

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'phone_number', 'role', 'auth_subject', 'is_superuser')
    list_filter = ('role', 'is_superuser')
    search_fields = ('username', 'email', 'phone_number', 'auth_subject')

@admin.register(ProviderProfile)
class ProviderProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'base_latitude', 'base_longitude')
    search_fields = ('user__username', 'user__email')

@admin.register(ProviderCategory)
class ProviderCategoryAdmin(admin.ModelAdmin):
    list_display = ('provider', 'category')
    search_fields = ('provider__user__username', 'category__name')

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_at')
    search_fields = ('name',)

@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ('title', 'seeker', 'provider', 'category_name', 'budget', 'status', 'created_at')
    list_filter = ('status', 'category')
    search_fields = ('title', 'seeker__username')
    # status is written only through the lifecycle controller
    readonly_fields = ('status', 'provider', 'agreed_amount', 'completed_at')

@admin.register(Bid)
class BidAdmin(admin.ModelAdmin):
    list_display = ('job', 'provider', 'amount', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('job__title', 'provider__username')

@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ('job', 'user', 'rating', 'created_at')
    search_fields = ('job__title', 'user__username')

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('job', 'amount', 'method', 'status', 'updated_at')
    list_filter = ('status', 'method')

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('recipient', 'type', 'title', 'read', 'created_at')
    list_filter = ('type', 'read')
    search_fields = ('recipient__username', 'title')

@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ('name', 'latitude', 'longitude')
    search_fields = ('name',)
