from django.urls import path
from . import views

urlpatterns = [
    path('jobs/<int:job_id>/match/<int:provider_id>', views.JobMatchScoreView.as_view(), name='job-match-score'),
    path('providers/<int:provider_id>/jobs', views.ProviderJobRecommendationView.as_view(), name='provider-job-recommendations'),
]
