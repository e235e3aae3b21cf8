"""
Booking URLs.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('clinics/<uuid:clinic_id>/requests', views.create_booking_request_view, name='booking-request-create'),
    path('requests/<uuid:booking_request_id>', views.booking_request_status, name='booking-request-status'),
]
