"""
URL configuration for the clinic scheduling service.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from apps.core.observability.health import HealthzView, ReadyzView

urlpatterns = [
    # Health checks (no auth required)
    path('healthz', HealthzView.as_view(), name='healthz'),
    path('readyz', ReadyzView.as_view(), name='readyz'),

    # Admin
    path('admin/', admin.site.urls),

    # Public API (NO authentication required)
    path('public/', include('apps.authz.urls')),  # Guest sessions
    path('public/', include('apps.scheduling.urls')),  # Availability
    path('public/', include('apps.intake.urls')),  # Intake invites

    # Private API (authentication required)
    path('api/', include('apps.core.urls')),  # JWT auth
    path('api/v1/booking/', include('apps.booking.urls')),  # Booking requests (guests allowed)
    path('api/v1/clinical/', include('apps.clinical.urls')),  # Direct appointment scheduling

    # API Schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
