"""
Booking resolution pipeline.

Turns a pending BookingRequest into an approved appointment or a rejection:

    pending -> lock acquired -> approved | rejected

The lock step makes redelivery safe: only the run that sets
notification_lock_at does any work. Rejections are written to the request
and never raised, except a reservation failure which is written and then
re-raised so the task is recorded as failed. Steps after the reservation
are best-effort; notification_sent_at is set once they have all run.
"""
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.clinical.models import AppointmentKindChoices
from apps.clinical.patients import PatientDetails, resolve_patient
from apps.clinical.reservation import ReservationError, reserve_appointment
from apps.core.observability import (
    get_sanitized_logger,
    log_booking_approved,
    log_booking_rejected,
    metrics,
)
from apps.core.observability.tracing import trace_span
from apps.core.utils import build_full_name, clean_str
from apps.intake.services import build_intake_start_url, create_intake_session, issue_intake_invite
from apps.notifications.dispatch import BookingEmail, send_booking_notifications
from apps.scheduling.config import build_schedule_config
from apps.scheduling.models import BusyBlockSourceChoices, PublicBookingSettings
from apps.scheduling.services import upsert_appointment_block

from .models import BookingRequest, BookingRequestStatusChoices

logger = get_sanitized_logger(__name__)

FOLLOWUP_SERVICE = ('fu', 'Follow-up')
NEW_PATIENT_SERVICE = ('np', 'New patient assessment')


class BookingRejected(Exception):
    """Raised inside the pipeline to stop with a rejection reason."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


def map_booking_kind(raw_kind):
    """
    Appointment kind and service for a requested booking kind.

    Returns:
        (kind, service_id, service_name_fallback)
    """
    if 'follow' in clean_str(raw_kind).lower():
        return (AppointmentKindChoices.FOLLOWUP,) + FOLLOWUP_SERVICE
    return (AppointmentKindChoices.NEW,) + NEW_PATIENT_SERVICE


def acquire_lock(booking_request_id, now) -> Optional[BookingRequest]:
    """
    Claim a booking request for processing.

    Returns the locked request, or None when it is missing or another run
    already claimed or finished it.
    """
    with transaction.atomic():
        booking_request = (
            BookingRequest.objects
            .select_for_update()
            .filter(id=booking_request_id)
            .first()
        )
        if booking_request is None:
            logger.warning('Booking request not found', extra={'booking_request_id': str(booking_request_id)})
            return None
        if booking_request.notification_sent_at or booking_request.notification_lock_at:
            return None
        booking_request.notification_lock_at = now
        booking_request.save(update_fields=['notification_lock_at', 'updated_at'])
    return booking_request


def reject(booking_request: BookingRequest, reason: str):
    booking_request.status = BookingRequestStatusChoices.REJECTED
    booking_request.rejection_reason = reason[:500]
    booking_request.save(update_fields=['status', 'rejection_reason', 'updated_at'])
    metrics.booking_resolutions_total.labels(result='rejected').inc()
    log_booking_rejected(booking_request, reason)


def _validate_times(booking_request: BookingRequest, now):
    start, end = booking_request.start_at, booking_request.end_at
    if start is None or end is None:
        raise BookingRejected('Invalid booking timestamps.')
    cutoff = settings.BOOKING_CUTOFF_MINUTES
    if start - now < timedelta(minutes=cutoff):
        raise BookingRejected(f'Bookings close {cutoff} minutes before the appointment time.')
    if end <= start:
        raise BookingRejected('Invalid booking time range.')


def _authorize_practitioner(booking_request: BookingRequest, config) -> str:
    practitioner_id = booking_request.requested_practitioner_id
    if not practitioner_id:
        raise BookingRejected('Missing practitioner id.')
    if config is None or not config.practitioner_ids:
        raise BookingRejected('Public booking practitioners are not configured.')
    if not config.allows_practitioner(practitioner_id):
        raise BookingRejected('Selected practitioner is not available for public booking.')
    return practitioner_id


def _patient_details(booking_request: BookingRequest) -> PatientDetails:
    first_name = clean_str(booking_request.patient_first_name)
    last_name = clean_str(booking_request.patient_last_name)
    if not first_name or not last_name or booking_request.patient_birth_date is None:
        raise BookingRejected('Missing required patient details (first name, last name, DOB).')
    return PatientDetails(
        first_name=first_name,
        last_name=last_name,
        birth_date=booking_request.patient_birth_date,
        email=booking_request.patient_email,
        phone=booking_request.patient_phone,
        address=booking_request.patient_address,
        consent_to_treatment=booking_request.patient_consent_to_treatment,
    )


def _load_settings(clinic_id) -> Optional[PublicBookingSettings]:
    return PublicBookingSettings.objects.filter(clinic_id=clinic_id).first()


def _side_effect_failed(step, booking_request, appointment=None):
    metrics.booking_side_effect_failures_total.labels(step=step).inc()
    logger.error(
        f'Booking {step} step failed (continuing)',
        exc_info=True,
        extra={
            'clinic_id': str(booking_request.clinic_id),
            'booking_request_id': str(booking_request.id),
            'appointment_id': str(appointment.id) if appointment else None,
        }
    )


def issue_pre_assessment(booking_request, appointment, booking_settings) -> str:
    """Create the intake session and invite; returns the deep link."""
    session = create_intake_session(
        appointment,
        flow_id=settings.INTAKE_DEFAULT_FLOW_ID,
        created_from='publicBooking',
    )
    invite, raw_token = issue_intake_invite(
        appointment,
        intake_session=session,
        patient_email_normalized=booking_request.patient_email_normalized,
        ttl_hours=settings.INTAKE_INVITE_TTL_HOURS,
    )
    base_url = booking_settings.public_base_url if booking_settings else ''
    url = build_intake_start_url(base_url, booking_request.clinic_id, raw_token)

    booking_request.intake_invite = invite
    booking_request.pre_assessment_url = url
    booking_request.save(update_fields=['intake_invite', 'pre_assessment_url', 'updated_at'])
    return url


def build_booking_email(booking_request, appointment, booking_settings, config, pre_assessment_url) -> BookingEmail:
    clinic = booking_request.clinic
    practitioner = appointment.practitioner
    practitioner_id = str(appointment.practitioner_id or '')
    practitioner_name = (
        clean_str(appointment.practitioner_name)
        or (config.practitioner_names.get(practitioner_id, '') if config else '')
    )
    return BookingEmail(
        clinic_id=str(booking_request.clinic_id),
        appointment_id=str(appointment.id),
        practitioner_id=practitioner_id,
        start=appointment.start,
        end=appointment.end,
        timezone=config.timezone if config else settings.SCHEDULING_DEFAULT_TIMEZONE,
        clinic_name=(
            (booking_settings.clinic_display_name if booking_settings else '')
            or clinic.name or 'Clinic'
        ),
        patient_email=booking_request.patient_email,
        patient_name=(
            clean_str(appointment.patient_name)
            or build_full_name(booking_request.patient_first_name, booking_request.patient_last_name)
        ),
        practitioner_name=practitioner_name,
        practitioner_email=practitioner.alert_email if practitioner else '',
        clinic_inbox_email=clinic.inbox_email or '',
        service_name=appointment.service_name,
        logo_url=(booking_settings.logo_url if booking_settings else '') or clinic.logo_url or '',
        contact_url=booking_settings.contact_url if booking_settings else '',
        pre_assessment_url=pre_assessment_url,
        locale=booking_request.locale,
    )


@metrics.track_duration(metrics.booking_resolution_duration_seconds)
def resolve_booking_request(booking_request_id, now=None) -> Optional[BookingRequest]:
    """
    Resolve a booking request. Safe to call more than once.

    Returns the request after processing, or None when this run did
    nothing (missing, already claimed or already finished).

    Raises:
        ReservationError: the reservation was refused; the request has
            already been marked rejected with the refusal message.
    """
    now = now or timezone.now()

    booking_request = acquire_lock(booking_request_id, now)
    if booking_request is None:
        metrics.booking_resolutions_total.labels(result='skipped').inc()
        return None
    if not booking_request.is_pending:
        metrics.booking_resolutions_total.labels(result='skipped').inc()
        return booking_request

    with trace_span('resolve_booking_request', attributes={
        'booking_request_id': str(booking_request.id),
        'clinic_id': str(booking_request.clinic_id),
    }):
        booking_settings = _load_settings(booking_request.clinic_id)
        config = build_schedule_config(booking_settings) if booking_settings else None

        try:
            _validate_times(booking_request, now)
            practitioner_id = _authorize_practitioner(booking_request, config)
            details = _patient_details(booking_request)
        except BookingRejected as exc:
            reject(booking_request, exc.reason)
            return booking_request

        patient, patient_created = resolve_patient(booking_request.clinic_id, details)

        kind, service_id, service_name_fallback = map_booking_kind(booking_request.kind)
        try:
            appointment = reserve_appointment(
                booking_request.clinic_id,
                kind=kind,
                start=booking_request.start_at,
                end=booking_request.end_at,
                practitioner_id=practitioner_id,
                patient_id=str(patient.id),
                service_id=service_id,
                actor=booking_request.requester,
                allow_closed_override=False,
                service_name_fallback=service_name_fallback,
                booking_request=booking_request,
            )
        except ReservationError as exc:
            reject(booking_request, exc.message)
            raise
        except Exception:
            reject(booking_request, 'Booking failed. Check logs.')
            raise

        try:
            upsert_appointment_block(
                appointment,
                source=BusyBlockSourceChoices.PUBLIC,
                booking_request=booking_request,
            )
        except Exception:
            _side_effect_failed('busy_block', booking_request, appointment)

        booking_request.status = BookingRequestStatusChoices.APPROVED
        booking_request.appointment = appointment
        booking_request.patient = patient
        booking_request.practitioner_id = practitioner_id
        booking_request.save(update_fields=['status', 'appointment', 'patient', 'practitioner_id', 'updated_at'])
        metrics.booking_resolutions_total.labels(result='approved').inc()
        log_booking_approved(booking_request, appointment, patient_created)

        pre_assessment_url = ''
        try:
            pre_assessment_url = issue_pre_assessment(booking_request, appointment, booking_settings)
        except Exception:
            _side_effect_failed('intake', booking_request, appointment)

        try:
            send_booking_notifications(
                build_booking_email(booking_request, appointment, booking_settings, config, pre_assessment_url)
            )
        except Exception:
            _side_effect_failed('notifications', booking_request, appointment)

        booking_request.notification_sent_at = timezone.now()
        booking_request.save(update_fields=['notification_sent_at', 'updated_at'])

    logger.info(
        'Booking processing complete',
        extra={
            'clinic_id': str(booking_request.clinic_id),
            'booking_request_id': str(booking_request.id),
            'appointment_id': str(appointment.id),
            'has_pre_assessment_url': bool(pre_assessment_url),
        }
    )
    return booking_request
