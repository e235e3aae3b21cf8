"""
Public authz URLs (mounted under /public/).
"""
from django.urls import path

from .views import create_guest_session

urlpatterns = [
    path('guest-session', create_guest_session, name='guest-session'),
]
