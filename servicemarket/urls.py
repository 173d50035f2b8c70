from django.contrib import admin
from django.urls import path, include
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

schema_view = get_schema_view(
    openapi.Info(
        title="Service Marketplace API",
        default_version='v1',
        description="API for posting jobs, bidding on them and paying for completed work",
    ),
    public=True,
)

urlpatterns = [
    path('', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('admin/', admin.site.urls),
    path('', include('apps.users.urls')),
    path('', include('apps.jobs.urls')),
    path('', include('apps.payments.urls')),
    path('', include('apps.notifications.urls')),
    path('', include('apps.recommendations.urls')),
    path('', include('apps.locations.urls')),
]
