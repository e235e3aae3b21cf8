"""
Tests for appointment reservation.

Covers:
1. Required fields for patient bookings
2. Practitioner must be an active clinic member
3. Overlap with active appointments (cancelled ones ignored)
4. Closures, with and without override
5. Nothing is written when a reservation is refused
"""
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from apps.clinical.models import (
    Appointment,
    AppointmentKindChoices,
    AppointmentStatusChoices,
    CreatedFromChoices,
)
from apps.clinical.reservation import (
    ClosedScheduleError,
    InvalidReservationError,
    PatientNotFoundError,
    PractitionerUnavailableError,
    ReservationConflictError,
    reserve_appointment,
)
from apps.scheduling.models import BusyBlock, Closure

START = datetime(2030, 1, 7, 9, 0, tzinfo=dt_timezone.utc)
END = START + timedelta(hours=1)


@pytest.fixture
def reserve(clinic, practitioner, patient):
    """reserve_appointment with a valid follow-up booking as the default."""

    def make(**kwargs):
        params = {
            'kind': AppointmentKindChoices.FOLLOWUP,
            'start': START,
            'end': END,
            'practitioner_id': str(practitioner.id),
            'patient_id': str(patient.id),
            'service_id': 'fu',
        }
        params.update(kwargs)
        return reserve_appointment(clinic.id, **params)

    return make


@pytest.mark.django_db
class TestReserveAppointment:

    def test_creates_manual_appointment(self, reserve, patient, practitioner):
        appointment = reserve()

        assert appointment.status == AppointmentStatusChoices.BOOKED
        assert appointment.created_from == CreatedFromChoices.MANUAL
        assert appointment.patient_name == 'Eva Svobodova'
        assert appointment.practitioner_name == practitioner.display_name
        assert appointment.service_name == 'fu'
        assert BusyBlock.objects.filter(appointment=appointment).exists()

    def test_service_name_fallback(self, reserve):
        appointment = reserve(service_name_fallback='Follow-up')

        assert appointment.service_name == 'Follow-up'

    @pytest.mark.parametrize('missing', ['patient_id', 'service_id', 'practitioner_id'])
    def test_patient_booking_requires_ids(self, reserve, missing):
        with pytest.raises(InvalidReservationError):
            reserve(**{missing: ''})

        assert Appointment.objects.count() == 0

    def test_admin_block_needs_no_patient(self, reserve):
        appointment = reserve(kind=AppointmentKindChoices.ADMIN, patient_id='', service_id='')

        assert appointment.patient is None
        assert appointment.patient_name == ''

    def test_invalid_range(self, reserve):
        with pytest.raises(InvalidReservationError):
            reserve(end=START)

    def test_unknown_kind(self, reserve):
        with pytest.raises(InvalidReservationError):
            reserve(kind='surgery')

    def test_inactive_practitioner(self, reserve, practitioner):
        practitioner.is_active = False
        practitioner.save()

        with pytest.raises(PractitionerUnavailableError):
            reserve()

    def test_practitioner_of_other_clinic(self, reserve):
        with pytest.raises(PractitionerUnavailableError):
            reserve(practitioner_id='not-a-uuid')

    def test_unknown_patient(self, reserve):
        with pytest.raises(PatientNotFoundError):
            reserve(patient_id='6f1c1f64-0000-4000-8000-000000000000')

    def test_overlap_is_refused(self, reserve):
        reserve()

        with pytest.raises(ReservationConflictError) as exc_info:
            reserve(start=START + timedelta(minutes=30), end=END + timedelta(minutes=30))

        assert exc_info.value.code == 'failed-precondition'
        assert Appointment.objects.count() == 1

    def test_touching_appointments_allowed(self, reserve):
        reserve()

        reserve(start=END, end=END + timedelta(hours=1))

        assert Appointment.objects.count() == 2

    def test_cancelled_appointment_frees_the_slot(self, reserve):
        first = reserve()
        first.status = AppointmentStatusChoices.CANCELLED
        first.save()

        reserve()

        assert Appointment.objects.count() == 2

    def test_closure_refuses_unless_overridden(self, reserve, clinic):
        Closure.objects.create(clinic=clinic, from_at=START - timedelta(hours=1), to_at=START + timedelta(minutes=15))

        with pytest.raises(ClosedScheduleError):
            reserve()

        appointment = reserve(allow_closed_override=True)
        assert appointment.pk is not None

    def test_inactive_closure_ignored(self, reserve, clinic):
        Closure.objects.create(clinic=clinic, from_at=START, to_at=END, is_active=False)

        assert reserve().pk is not None
