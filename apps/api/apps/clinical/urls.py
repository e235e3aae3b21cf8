"""
Clinical URLs (mounted under /api/v1/clinical/).
"""
from django.urls import path

from .views import ClinicAppointmentCreateView

urlpatterns = [
    path(
        'clinics/<uuid:clinic_id>/appointments',
        ClinicAppointmentCreateView.as_view(),
        name='clinic-appointment-create'
    ),
]
