"""
Booking request intake.

Validates a public booking submission and stores it as a pending
BookingRequest. Resolution happens asynchronously (see pipeline.py).
"""
import math
from datetime import date, datetime
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.dateparse import parse_date

from apps.core.errors import InvalidArgument, NotFound
from apps.core.models import Clinic
from apps.core.observability import get_sanitized_logger, log_domain_event, metrics
from apps.core.utils import clean_str, datetime_from_epoch_millis, normalize_email, normalize_phone

from .models import BookingRequest, BookingRequestSourceChoices, BookingRequestStatusChoices

logger = get_sanitized_logger(__name__)

MAX_APPOINTMENT_MINUTES = 240
DEFAULT_BOOKING_TZ = 'Europe/Prague'
DEFAULT_BOOKING_KIND = 'new'


def from_epoch_millis(value) -> datetime:
    """
    Positive epoch milliseconds to an aware UTC datetime.

    Raises:
        ValueError: not a finite positive number, or out of range
    """
    if isinstance(value, bool):
        raise ValueError('Invalid ms timestamp')
    ms = float(value)
    if not math.isfinite(ms) or ms <= 0:
        raise ValueError('Invalid ms timestamp')
    return datetime_from_epoch_millis(ms)


def parse_birth_date(patient: Dict[str, Any]) -> Optional[date]:
    """DOB from ``dob`` (YYYY-MM-DD) or ``dob_ms`` (epoch millis, UTC date)."""
    raw = clean_str(patient.get('dob'))
    if raw:
        try:
            return parse_date(raw)
        except ValueError:
            return None
    if patient.get('dob_ms') not in (None, ''):
        try:
            return from_epoch_millis(patient['dob_ms']).date()
        except (TypeError, ValueError, OverflowError):
            return None
    return None


def _load_clinic(clinic_id) -> Clinic:
    try:
        return Clinic.objects.get(id=clinic_id, is_active=True)
    except (Clinic.DoesNotExist, DjangoValidationError):
        raise NotFound('Clinic not found.')


def create_booking_request(clinic_id, requester, data: Dict[str, Any]) -> BookingRequest:
    """
    Validate a booking submission and persist it as pending.

    ``data`` keys: practitioner_id (or legacy clinician_id), start_utc_ms,
    end_utc_ms, tz, kind, locale, patient {first_name, last_name, dob or
    dob_ms, email, phone, address, consent_to_treatment}, appointment
    {minutes, label, price_text, description}.

    Raises:
        InvalidArgument: malformed submission
        NotFound: unknown or inactive clinic
    """
    clinic = _load_clinic(clinic_id)

    practitioner_id = clean_str(data.get('practitioner_id')) or clean_str(data.get('clinician_id'))
    if not practitioner_id:
        raise InvalidArgument('Missing practitioner_id/clinician_id.')

    try:
        start_at = from_epoch_millis(data.get('start_utc_ms'))
        end_at = from_epoch_millis(data.get('end_utc_ms'))
    except (TypeError, ValueError, OverflowError):
        raise InvalidArgument('Invalid start/end times.')
    if end_at <= start_at:
        raise InvalidArgument('End time must be after start time.')

    patient = data.get('patient') or {}
    if not isinstance(patient, dict):
        raise InvalidArgument('Invalid patient details.')
    birth_date = parse_birth_date(patient)
    if birth_date is None:
        raise InvalidArgument('Missing/invalid patient DOB.')
    first_name = clean_str(patient.get('first_name'))
    last_name = clean_str(patient.get('last_name'))
    if not first_name or not last_name:
        raise InvalidArgument('Missing patient first/last name.')

    appointment = data.get('appointment') or {}
    if not isinstance(appointment, dict):
        raise InvalidArgument('Invalid appointment details.')
    try:
        minutes = float(appointment.get('minutes'))
    except (TypeError, ValueError):
        minutes = math.nan
    if not math.isfinite(minutes) or minutes <= 0 or minutes > MAX_APPOINTMENT_MINUTES:
        raise InvalidArgument('Invalid appointment minutes.')

    booking_request = BookingRequest.objects.create(
        clinic=clinic,
        practitioner_id=practitioner_id,
        clinician_id=clean_str(data.get('clinician_id')),
        start_at=start_at,
        end_at=end_at,
        tz=clean_str(data.get('tz')) or DEFAULT_BOOKING_TZ,
        locale=clean_str(data.get('locale')),
        kind=clean_str(data.get('kind')) or DEFAULT_BOOKING_KIND,
        patient_first_name=first_name,
        patient_last_name=last_name,
        patient_birth_date=birth_date,
        patient_email=normalize_email(patient.get('email')),
        patient_email_normalized=normalize_email(patient.get('email')),
        patient_phone=clean_str(patient.get('phone')),
        patient_phone_normalized=normalize_phone(patient.get('phone')),
        patient_address=clean_str(patient.get('address')),
        patient_consent_to_treatment=patient.get('consent_to_treatment') is True,
        appointment_minutes=int(minutes),
        appointment_label=clean_str(appointment.get('label')),
        appointment_price_text=clean_str(appointment.get('price_text')),
        appointment_description=clean_str(appointment.get('description')),
        requester=requester if requester is not None and requester.is_authenticated else None,
        status=BookingRequestStatusChoices.PENDING,
        source=BookingRequestSourceChoices.PUBLIC_API,
    )

    metrics.booking_requests_created_total.labels(result='created').inc()
    log_domain_event(
        'booking.request.created',
        entity_type='BookingRequest',
        entity_id=str(booking_request.id),
        entity_ids={
            'clinic_id': str(clinic.id),
            'practitioner_id': practitioner_id,
        },
        result='success',
        start_utc_ms=int(start_at.timestamp() * 1000),
    )
    return booking_request
