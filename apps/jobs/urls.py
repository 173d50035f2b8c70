from django.urls import path
from .views import (
    JobListCreateView, JobDetailView, JobBidsView, BidWithdrawView,
    BidAcceptView, BidRejectView, JobCompleteView, JobCancelView,
    JobStatusUpdateView, ProviderBidsView, ProviderHistoryView,
    CategoryListCreateView, CategoryDetailView, RatingListCreateView, RatingDetailView
)

urlpatterns = [
    path('jobs', JobListCreateView.as_view(), name='job_list'),
    path('jobs/<int:pk>', JobDetailView.as_view(), name='job_detail'),
    path('jobs/<int:pk>/bids', JobBidsView.as_view(), name='job_bids'),
    path('jobs/<int:job_id>/bids/<int:provider_id>', BidWithdrawView.as_view(), name='bid_withdraw'),
    path('jobs/<int:pk>/complete', JobCompleteView.as_view(), name='job_complete'),
    path('jobs/<int:pk>/cancel', JobCancelView.as_view(), name='job_cancel'),
    path('jobs/<int:pk>/status', JobStatusUpdateView.as_view(), name='job_status_update'),
    path('bids/<int:pk>/accept', BidAcceptView.as_view(), name='bid_accept'),
    path('bids/<int:pk>/reject', BidRejectView.as_view(), name='bid_reject'),
    path('providers/<int:provider_id>/bids', ProviderBidsView.as_view(), name='provider_bids'),
    path('providers/<int:provider_id>/history', ProviderHistoryView.as_view(), name='provider_history'),
    path('categories', CategoryListCreateView.as_view(), name='category_list'),
    path('categories/<int:pk>', CategoryDetailView.as_view(), name='category_detail'),
    path('ratings', RatingListCreateView.as_view(), name='rating_list'),
    path('ratings/<int:pk>', RatingDetailView.as_view(), name='rating_detail'),
]
