"""
Public availability service.

Loads configuration and busy intervals for one query, then hands them to
the pure slot computation in apps.scheduling.availability.
"""
import time
import uuid
from dataclasses import replace
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Optional

import pytz
from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.authz.models import Practitioner
from apps.clinical.models import AppointmentStatusChoices
from apps.core.errors import FailedPrecondition, InvalidArgument, NotFound, PermissionDenied
from apps.core.models import Clinic
from apps.core.observability import get_sanitized_logger, metrics
from apps.core.observability.tracing import trace_span
from apps.core.utils import clean_str, datetime_from_epoch_millis
from apps.scheduling.availability import compute_day_flags, compute_slots
from apps.scheduling.busy import (
    load_appointment_blocks,
    load_busy,
    load_clinic_wide_busy,
    load_closures,
)
from apps.scheduling.config import (
    MODE_CODE_UNLOCK,
    CorporateAccess,
    ScheduleConfig,
    build_schedule_config,
    intersect_weekly_hours,
    normalize_weekly_hours,
    weekly_hours_to_dict,
)
from apps.scheduling.models import (
    BusyBlock,
    BusyBlockScopeChoices,
    BusyBlockSourceChoices,
    BusyBlockStatusChoices,
    PublicBookingSettings,
)

logger = get_sanitized_logger(__name__)

PURPOSE_OPENING_WINDOWS = 'openingWindows'


def parse_instant(name: str, iso_value=None, ms_value=None) -> datetime:
    """
    Parse an absolute instant from an ISO string or epoch milliseconds.

    Naive ISO strings are taken as UTC.
    """
    iso_value = clean_str(iso_value)
    if iso_value:
        try:
            parsed = parse_datetime(iso_value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise InvalidArgument(f'{name} must be an ISO 8601 datetime.')
        if timezone.is_naive(parsed):
            parsed = parsed.replace(tzinfo=dt_timezone.utc)
        return parsed

    if ms_value in (None, ''):
        raise InvalidArgument(f'{name} is required.')
    try:
        return datetime_from_epoch_millis(int(ms_value))
    except (TypeError, ValueError):
        raise InvalidArgument(f'{name} must be epoch milliseconds.')


def _validate_timezone(name: str) -> str:
    if name and name not in pytz.all_timezones_set:
        raise InvalidArgument(f'Unknown timezone: {name}')
    return name


def resolve_corporate(config: ScheduleConfig, slug: str, code: str) -> Optional[CorporateAccess]:
    """Resolve a corporate link; an unknown slug is refused."""
    if not clean_str(slug):
        return None
    program = config.find_program(slug)
    if program is None:
        raise PermissionDenied('Invalid corporate link.')
    unlocked = bool(clean_str(code)) if program.mode == MODE_CODE_UNLOCK else True
    return CorporateAccess(program=program, unlocked=unlocked)


def load_booking_settings(clinic_id) -> PublicBookingSettings:
    try:
        clinic = Clinic.objects.get(id=clinic_id, is_active=True)
    except (Clinic.DoesNotExist, ValidationError):
        raise NotFound('Clinic not found.')
    try:
        return clinic.public_booking_settings
    except PublicBookingSettings.DoesNotExist:
        raise FailedPrecondition('Public booking is not configured for this clinic.')


def _load_practitioner(clinic_id, practitioner_id) -> Optional[Practitioner]:
    try:
        pk = uuid.UUID(practitioner_id)
    except ValueError:
        return None
    return Practitioner.objects.filter(clinic_id=clinic_id, id=pk).first()


def get_public_availability(clinic_id, params: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Public slot listing for one clinic.

    ``params`` keys: practitioner_id, service_id, range_start / range_end (ISO)
    or range_start_ms / range_end_ms, tz, corporate_slug, corporate_code,
    purpose. ``purpose=openingWindows`` applies only clinic-wide busy blocks
    and ignores appointments.
    """
    now = now or timezone.now()
    practitioner_id = clean_str(params.get('practitioner_id'))
    opening_only = clean_str(params.get('purpose')) == PURPOSE_OPENING_WINDOWS

    range_start = parse_instant('range_start', params.get('range_start'), params.get('range_start_ms'))
    range_end = parse_instant('range_end', params.get('range_end'), params.get('range_end_ms'))
    if range_end <= range_start:
        raise InvalidArgument('Invalid range.')

    booking_settings = load_booking_settings(clinic_id)
    tz_override = _validate_timezone(clean_str(params.get('tz')))
    config = build_schedule_config(booking_settings)

    if practitioner_id and not config.allows_practitioner(practitioner_id):
        raise InvalidArgument('Selected practitioner is not available for public booking.')

    corporate = resolve_corporate(config, params.get('corporate_slug'), params.get('corporate_code'))

    practitioner = _load_practitioner(clinic_id, practitioner_id) if practitioner_id else None
    staff_hours = normalize_weekly_hours(practitioner.weekly_hours) if practitioner else None
    staff_applied = bool(staff_hours and any(staff_hours.values()))

    effective_tz = (
        tz_override
        or (clean_str(practitioner.timezone) if staff_applied else '')
        or config.timezone
    )
    if staff_applied:
        weekly = intersect_weekly_hours(config.weekly_hours, staff_hours)
    else:
        weekly = config.weekly_hours
    config = replace(config, timezone=_validate_timezone(effective_tz), weekly_hours=weekly)

    appointments_applied = bool(practitioner_id) and not opening_only

    with trace_span('scheduling.public_availability', attributes={
        'clinic_id': str(clinic_id),
        'opening_only': opening_only,
    }):
        closures = load_closures(clinic_id, range_start, range_end)
        if opening_only:
            busy = load_clinic_wide_busy(clinic_id, range_start, range_end)
        else:
            busy = load_busy(clinic_id, practitioner_id, range_start, range_end)
        if appointments_applied and practitioner is not None:
            busy += load_appointment_blocks(clinic_id, practitioner.id, range_start, range_end)

        started = time.monotonic()
        slots = compute_slots(config, closures, busy, corporate, range_start, range_end, now)
        metrics.availability_compute_duration_seconds.observe(time.monotonic() - started)
        day_flags = compute_day_flags(config, corporate, range_start, range_end)

    metrics.availability_slots_returned.observe(len(slots))
    logger.info(
        'Public availability computed',
        extra={
            'event': 'scheduling.availability.computed',
            'clinic_id': str(clinic_id),
            'practitioner_id': practitioner_id or None,
            'slot_count': len(slots),
            'opening_only': opening_only,
        }
    )

    return {
        'clinic_id': str(clinic_id),
        'service_id': clean_str(params.get('service_id')),
        'practitioner_id': practitioner_id,
        'timezone': config.timezone,
        'step_minutes': config.slot_step_minutes,
        'corporate': corporate.to_dict() if corporate else None,
        'weekly_hours': weekly_hours_to_dict(weekly),
        'day_flags': day_flags,
        'slots': [slot.to_dict() for slot in slots],
        'opening_only': opening_only,
        'staff_availability_applied': staff_applied,
        'appointments_applied': appointments_applied,
    }


def upsert_appointment_block(appointment, source=None, booking_request=None) -> BusyBlock:
    """
    Create or refresh the busy block mirroring an appointment.

    The block is scoped to the appointment's practitioner (clinic-wide for
    practitioner-less admin blocks) and follows the appointment's window;
    it is marked cancelled when the appointment is cancelled. An existing
    block keeps its source unless one is given.
    """
    if appointment.status == AppointmentStatusChoices.CANCELLED:
        status = BusyBlockStatusChoices.CANCELLED
    else:
        status = BusyBlockStatusChoices.BOOKED

    defaults = {
        'clinic_id': appointment.clinic_id,
        'start_at': appointment.start,
        'end_at': appointment.end,
        'status': status,
        'scope': (
            BusyBlockScopeChoices.PRACTITIONER if appointment.practitioner_id
            else BusyBlockScopeChoices.CLINIC
        ),
        'kind': appointment.kind,
        'practitioner_id': appointment.practitioner_id,
    }
    if source:
        defaults['source'] = source
    if booking_request is not None:
        defaults['booking_request'] = booking_request

    block, _ = BusyBlock.objects.update_or_create(
        appointment=appointment,
        defaults=defaults,
        create_defaults={'source': BusyBlockSourceChoices.RESERVATION, **defaults},
    )
    return block
