from django.urls import path
from .views import (
    UserCreateView, UserDetailView, UserBySubjectView,
    ProviderPreferencesView, UserDashboardView
)

urlpatterns = [
    path('users', UserCreateView.as_view(), name='user_create'),
    path('users/by-subject/<str:subject>', UserBySubjectView.as_view(), name='user_by_subject'),
    path('users/<int:pk>', UserDetailView.as_view(), name='user_detail'),
    path('users/<int:pk>/preferences', ProviderPreferencesView.as_view(), name='provider_preferences'),
    path('users/<int:pk>/dashboard', UserDashboardView.as_view(), name='user_dashboard'),
]
