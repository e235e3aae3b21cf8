"""
Celery tasks for booking resolution.
"""
from celery import shared_task

from apps.core.observability import get_sanitized_logger
from apps.core.observability.correlation import bind_task_context, clear_request_context

logger = get_sanitized_logger(__name__)


@shared_task(name='apps.booking.tasks.resolve_booking_request_task', acks_late=True)
def resolve_booking_request_task(booking_request_id):
    """
    Resolve a pending booking request.

    Redelivery is harmless: the pipeline claims the request under a row
    lock and later runs return without doing anything.

    Args:
        booking_request_id: BookingRequest UUID as a string
    """
    from .pipeline import resolve_booking_request

    bind_task_context(f'booking-request-{booking_request_id}')
    try:
        booking_request = resolve_booking_request(booking_request_id)
    finally:
        clear_request_context()

    if booking_request is None:
        return f"Booking request {booking_request_id} already handled"
    return f"Booking request {booking_request_id} {booking_request.status}"
