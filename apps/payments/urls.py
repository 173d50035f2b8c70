from django.urls import path
from .views import JobPaymentView

urlpatterns = [
    path('jobs/<int:pk>/payment', JobPaymentView.as_view(), name='job_payment'),
]
