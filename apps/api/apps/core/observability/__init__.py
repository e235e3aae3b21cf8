"""
Observability for the scheduling service.

Structured logging, metrics, tracing and health checks with patient data
protection.
"""
from .metrics import metrics
from .events import log_booking_approved, log_booking_rejected, log_domain_event
from .logging import get_sanitized_logger

__all__ = [
    'metrics',
    'log_domain_event',
    'log_booking_approved',
    'log_booking_rejected',
    'get_sanitized_logger',
]
