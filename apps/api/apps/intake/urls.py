"""
Public intake URLs (mounted under /public/).
"""
from django.urls import path

from .views import consume_invite, submit_intake

urlpatterns = [
    path('clinics/<uuid:clinic_id>/intake/consume', consume_invite, name='intake-consume'),
    path('clinics/<uuid:clinic_id>/intake/submit', submit_intake, name='intake-submit'),
]
