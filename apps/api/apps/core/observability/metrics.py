"""
Prometheus metrics for scheduling and booking flows.
"""
import time
from functools import wraps

from prometheus_client import Counter, Histogram


class MetricsRegistry:
    """
    Central metrics registry.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        self._setup_metrics()

    def _create_counter(self, name, description, labels=None):
        return Counter(name, description, labels or [])

    def _create_histogram(self, name, description, labels=None, buckets=None):
        if buckets:
            return Histogram(name, description, labels or [], buckets=buckets)
        return Histogram(name, description, labels or [])

    def _setup_metrics(self):
        """Setup all application metrics."""

        # ===================================================================
        # HTTP Metrics
        # ===================================================================
        self.exceptions_total = self._create_counter(
            'exceptions_total',
            'Total exceptions',
            ['exception_type', 'location']
        )

        # ===================================================================
        # Availability Metrics
        # ===================================================================
        self.availability_requests_total = self._create_counter(
            'availability_requests_total',
            'Public availability queries',
            ['result']  # success, invalid, denied
        )

        self.availability_slots_returned = self._create_histogram(
            'availability_slots_returned',
            'Number of slots returned per availability query',
            buckets=[0, 1, 5, 10, 25, 50, 100, 250, 500, 1000]
        )

        self.availability_compute_duration_seconds = self._create_histogram(
            'availability_compute_duration_seconds',
            'Slot computation duration',
            buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
        )

        # ===================================================================
        # Booking Metrics
        # ===================================================================
        self.booking_requests_created_total = self._create_counter(
            'booking_requests_created_total',
            'Booking requests accepted at intake',
            ['result']  # accepted, invalid
        )

        self.booking_resolutions_total = self._create_counter(
            'booking_resolutions_total',
            'Booking request resolution outcomes',
            ['result']  # approved, rejected, idempotent, skipped, error
        )

        self.booking_resolution_duration_seconds = self._create_histogram(
            'booking_resolution_duration_seconds',
            'Duration of booking request resolution',
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
        )

        self.booking_side_effect_failures_total = self._create_counter(
            'booking_side_effect_failures_total',
            'Best-effort booking steps that failed',
            ['step']  # busy_block_mirror, intake_invite, notifications
        )

        # ===================================================================
        # Reservation Metrics
        # ===================================================================
        self.appointment_reservations_total = self._create_counter(
            'appointment_reservations_total',
            'Appointment reservation attempts',
            ['kind', 'result']  # result: created, conflict, closed, invalid
        )

        # ===================================================================
        # Patient Metrics
        # ===================================================================
        self.patient_resolutions_total = self._create_counter(
            'patient_resolutions_total',
            'Patient resolution outcomes for public bookings',
            ['result']  # matched, created, dob_mismatch
        )

        # ===================================================================
        # Notification Metrics
        # ===================================================================
        self.notifications_total = self._create_counter(
            'notifications_total',
            'Booking notification attempts',
            ['event', 'status']  # status: accepted, skipped, error
        )

        # ===================================================================
        # Intake Metrics
        # ===================================================================
        self.intake_invites_total = self._create_counter(
            'intake_invites_total',
            'Intake invite lifecycle events',
            ['action']  # issued, consumed, resumed, expired, invalid
        )

        # ===================================================================
        # Public Metrics
        # ===================================================================
        self.public_throttled_total = self._create_counter(
            'public_throttled_total',
            'Public requests rejected by throttling',
            ['scope']
        )

    def track_duration(self, histogram_metric):
        """
        Decorator to track function duration.

        Usage:
            @metrics.track_duration(metrics.booking_resolution_duration_seconds)
            def resolve_booking_request(booking_request_id):
                ...
        """
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return func(*args, **kwargs)
                finally:
                    histogram_metric.observe(time.time() - start_time)
            return wrapper
        return decorator


# Global metrics instance
metrics = MetricsRegistry()
