"""
Domain events logging helpers.

Provides structured event logging for business operations.
"""
from typing import Dict, Optional

from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)

_ERROR_RESULTS = {'failure', 'error'}
_WARNING_RESULTS = {'warning', 'blocked', 'throttled', 'rejected'}


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'booking.request.approved')
        entity_type: Type of entity (e.g., 'BookingRequest', 'Appointment')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, rejected, error, ...)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'booking.request.approved',
            entity_type='BookingRequest',
            entity_id=str(booking_request.id),
            entity_ids={'appointment_id': str(appointment.id)},
            result='success',
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    event_data.update(sanitize_dict(extra_fields))

    if result in _ERROR_RESULTS:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in _WARNING_RESULTS:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_booking_rejected(booking_request, reason):
    """Log a booking request rejected by the resolution pipeline."""
    log_domain_event(
        'booking.request.rejected',
        entity_type='BookingRequest',
        entity_id=str(booking_request.id),
        entity_ids={'clinic_id': str(booking_request.clinic_id)},
        result='rejected',
        reason=reason,
    )


def log_booking_approved(booking_request, appointment, patient_created):
    """Log a booking request converted into an appointment."""
    log_domain_event(
        'booking.request.approved',
        entity_type='BookingRequest',
        entity_id=str(booking_request.id),
        entity_ids={
            'clinic_id': str(booking_request.clinic_id),
            'appointment_id': str(appointment.id),
            'patient_id': str(appointment.patient_id),
        },
        result='success',
        patient_created=patient_created,
    )
