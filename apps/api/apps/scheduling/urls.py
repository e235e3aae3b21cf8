"""
Public scheduling URLs (mounted under /public/).
"""
from django.urls import path

from .views import public_availability

urlpatterns = [
    path('clinics/<uuid:clinic_id>/availability', public_availability, name='public-availability'),
]
