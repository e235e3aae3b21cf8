"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Clinic with public booking settings (weekdays 08:00-13:00, Europe/Prague)
- Practitioner on the public allowlist
- Authenticated API clients (guest, clinic member by flags)
"""
from datetime import date

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.authz.models import ClinicMembership, Practitioner, User
from apps.clinical.models import Patient
from apps.core.models import Clinic
from apps.notifications.models import NotificationEventChoices, NotificationSettings
from apps.scheduling.models import PublicBookingSettings

WEEKDAY_HOURS = {
    key: [{'start': '08:00', 'end': '13:00'}]
    for key in ('mon', 'tue', 'wed', 'thu', 'fri')
}


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def guest_user(db):
    return User.objects.create_guest()


@pytest.fixture
def guest_client(guest_user):
    """API client authenticated as an anonymous guest identity."""
    client = APIClient()
    client.force_authenticate(user=guest_user)
    return client


@pytest.fixture
def member_client_factory(db, clinic):
    """
    Build an API client for a clinic member holding the given flags.

    Usage:
        client, user = member_client_factory(['schedule.read', 'schedule.write'])
    """
    counter = {'n': 0}

    def make(flags, status='active', is_active=True):
        counter['n'] += 1
        user = User.objects.create_user(
            email=f'staff{counter["n"]}@clinic.test',
            password='testpass123',
        )
        ClinicMembership.objects.create(
            clinic=clinic,
            user=user,
            status=status,
            is_active=is_active,
            permissions={flag: True for flag in flags},
        )
        client = APIClient()
        client.force_authenticate(user=user)
        return client, user

    return make


# ============================================================================
# Model instances
# ============================================================================

@pytest.fixture
def clinic(db):
    return Clinic.objects.create(
        name='Riverside Physio',
        slug='riverside',
        inbox_email='Front.Desk@riverside.test',
    )


@pytest.fixture
def practitioner(db, clinic):
    user = User.objects.create_user(email='dr.novak@riverside.test', password='testpass123')
    return Practitioner.objects.create(
        user=user,
        clinic=clinic,
        display_name='Dr. Jana Novak',
        email='jana.novak@riverside.test',
        is_active=True,
    )


@pytest.fixture
def booking_settings(db, clinic, practitioner):
    return PublicBookingSettings.objects.create(
        clinic=clinic,
        timezone='Europe/Prague',
        slot_step_minutes=30,
        weekly_hours=WEEKDAY_HOURS,
        practitioners=[{'id': str(practitioner.id), 'display_name': practitioner.display_name}],
        public_base_url='https://book.riverside.test',
        clinic_display_name='Riverside Physio',
    )


@pytest.fixture
def notification_settings(db, clinic):
    return NotificationSettings.objects.create(
        clinic=clinic,
        default_locale='en',
        reply_to_email='hello@riverside.test',
        events={
            NotificationEventChoices.PATIENT_CONFIRMATION: {
                'enabled': True,
                'template_id_by_locale': {'en': 'booking_patient_confirmation'},
            },
            NotificationEventChoices.CLINICIAN_NOTIFICATION: {
                'enabled': True,
                'template_id_by_locale': {'en': 'booking_clinician_notification'},
                'recipient_policy': {'mode': 'both'},
            },
        },
    )


@pytest.fixture
def patient(db, clinic):
    return Patient.objects.create(
        clinic=clinic,
        first_name='Eva',
        last_name='Svobodova',
        full_name='Eva Svobodova',
        full_name_lower='eva svobodova',
        birth_date=date(1988, 4, 12),
        email='eva@example.com',
        email_normalized='eva@example.com',
        phone='+420 601 123 456',
        phone_normalized='+420601123456',
    )
