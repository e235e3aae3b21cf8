"""
Appointment reservation.

reserve_appointment is the single write path for appointments. It runs in
one transaction and locks the practitioner row, so two reservations for the
same practitioner are serialized and the overlap check cannot race.
"""
import uuid
from datetime import datetime
from typing import Optional

from django.db import transaction

from apps.authz.models import Practitioner
from apps.core.observability import get_sanitized_logger, log_domain_event, metrics
from apps.core.utils import build_full_name, clean_str

from .models import (
    ACTIVE_APPOINTMENT_STATUSES,
    Appointment,
    AppointmentKindChoices,
    CreatedFromChoices,
    Patient,
)

logger = get_sanitized_logger(__name__)


class ReservationError(Exception):
    """Base class for reservation failures. ``code`` follows the API error taxonomy."""
    code = 'failed-precondition'
    metric_result = 'error'

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidReservationError(ReservationError):
    code = 'invalid-argument'
    metric_result = 'invalid'


class ReservationConflictError(ReservationError):
    metric_result = 'conflict'


class ClosedScheduleError(ReservationError):
    metric_result = 'closed'


class PractitionerUnavailableError(ReservationError):
    metric_result = 'practitioner_unavailable'


class PatientNotFoundError(ReservationError):
    metric_result = 'patient_not_found'


def _as_uuid(value) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(clean_str(value))
    except ValueError:
        return None


def _resolve_patient_name(patient: Patient) -> str:
    return build_full_name(patient.first_name, patient.last_name) or clean_str(patient.full_name)


def _assert_no_closure_overlap(clinic_id, start: datetime, end: datetime):
    from apps.scheduling.models import Closure

    closure = Closure.objects.filter(
        clinic_id=clinic_id,
        is_active=True,
        from_at__lt=end,
        to_at__gt=start,
    ).first()
    if closure is not None:
        logger.info(
            'Reservation refused by closure',
            extra={'clinic_id': str(clinic_id), 'closure_id': str(closure.id)}
        )
        raise ClosedScheduleError('Appointment overlaps a clinic closure.')


def _assert_no_conflict(clinic_id, practitioner_id, start: datetime, end: datetime):
    conflict = Appointment.objects.filter(
        clinic_id=clinic_id,
        practitioner_id=practitioner_id,
        status__in=ACTIVE_APPOINTMENT_STATUSES,
        start__lt=end,
        end__gt=start,
    ).exists()
    if conflict:
        raise ReservationConflictError('The selected time is no longer available.')


def reserve_appointment(
    clinic_id,
    kind: str,
    start: datetime,
    end: datetime,
    practitioner_id=None,
    patient_id=None,
    service_id: str = '',
    actor=None,
    allow_closed_override: bool = False,
    service_name_fallback: str = '',
    booking_request=None,
) -> Appointment:
    """
    Create an appointment after enforcing the scheduling rules.

    Non-admin kinds need a patient, a service and an active practitioner.
    Overlap with an active appointment of the same practitioner is refused;
    overlap with an active closure is refused unless
    ``allow_closed_override`` is set. When ``booking_request`` is given the
    appointment is marked as created from public booking and linked to it
    in the same transaction.

    Raises:
        ReservationError subclasses; nothing is written when one is raised.
    """
    kind = clean_str(kind) or AppointmentKindChoices.FOLLOWUP
    try:
        with transaction.atomic():
            appointment = _reserve(
                clinic_id, kind, start, end, practitioner_id, patient_id, service_id,
                actor, allow_closed_override, service_name_fallback, booking_request,
            )
    except ReservationError as exc:
        metrics.appointment_reservations_total.labels(kind=kind, result=exc.metric_result).inc()
        logger.warning(
            f'Reservation refused: {exc.message}',
            extra={
                'event': 'clinical.appointment.reservation_refused',
                'clinic_id': str(clinic_id),
                'code': exc.code,
            }
        )
        raise

    metrics.appointment_reservations_total.labels(kind=kind, result='created').inc()
    log_domain_event(
        'clinical.appointment.reserved',
        entity_type='Appointment',
        entity_id=str(appointment.id),
        entity_ids={
            'clinic_id': str(clinic_id),
            'practitioner_id': str(appointment.practitioner_id) if appointment.practitioner_id else None,
        },
        result='success',
        kind=kind,
        created_from=appointment.created_from,
    )
    return appointment


def _reserve(clinic_id, kind, start, end, practitioner_id, patient_id, service_id,
             actor, allow_closed_override, service_name_fallback, booking_request):
    if kind not in AppointmentKindChoices.values:
        raise InvalidReservationError(f'Unknown appointment kind: {kind}')
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        raise InvalidReservationError('Invalid start/end (end must be after start).')
    if end <= start:
        raise InvalidReservationError('Invalid start/end (end must be after start).')

    is_admin = kind == AppointmentKindChoices.ADMIN
    if not is_admin and not (clean_str(patient_id) and clean_str(service_id) and clean_str(practitioner_id)):
        raise InvalidReservationError('patientId, serviceId, practitionerId are required for patient bookings.')

    practitioner = None
    if clean_str(practitioner_id):
        pk = _as_uuid(practitioner_id)
        if pk is not None:
            practitioner = (
                Practitioner.objects
                .select_for_update()
                .filter(clinic_id=clinic_id, id=pk)
                .first()
            )
        if practitioner is None or not practitioner.is_active:
            raise PractitionerUnavailableError('Selected practitioner is not an active clinic member.')
        _assert_no_conflict(clinic_id, practitioner.id, start, end)

    if not allow_closed_override:
        _assert_no_closure_overlap(clinic_id, start, end)

    patient = None
    patient_name = ''
    if not is_admin:
        pk = _as_uuid(patient_id)
        patient = Patient.objects.filter(clinic_id=clinic_id, id=pk).first() if pk else None
        if patient is None:
            raise PatientNotFoundError('Selected patient was not found in this clinic.')
        patient_name = _resolve_patient_name(patient)
        if not patient_name:
            raise PatientNotFoundError('Patient record is missing a name (first_name/last_name).')

    appointment = Appointment.objects.create(
        clinic_id=clinic_id,
        practitioner=practitioner,
        patient=patient,
        kind=kind,
        service_id=clean_str(service_id),
        service_name=clean_str(service_name_fallback) or clean_str(service_id),
        start=start,
        end=end,
        patient_name=patient_name,
        practitioner_name=practitioner.display_name if practitioner else '',
        created_from=(
            CreatedFromChoices.PUBLIC_BOOKING if booking_request is not None
            else CreatedFromChoices.MANUAL
        ),
        created_by_user=actor if actor is not None and actor.is_authenticated else None,
    )

    if booking_request is not None:
        booking_request.appointment = appointment
        booking_request.save(update_fields=['appointment', 'updated_at'])

    return appointment
