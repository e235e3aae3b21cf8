"""
Booking models: booking_request
"""
import uuid
from django.conf import settings
from django.db import models


class BookingRequestStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class BookingRequestSourceChoices(models.TextChoices):
    PUBLIC_API = 'publicBookingApi', 'Public booking API'
    ADMIN = 'admin', 'Admin'


class BookingRequest(models.Model):
    """
    A public booking request awaiting resolution.

    Written once by the booking endpoint in status ``pending``; the
    resolution pipeline moves it to ``approved`` or ``rejected`` exactly
    once. Rows are never deleted.

    Fields:
    - practitioner_id: canonical practitioner reference (string, not FK:
      the value is untrusted until the pipeline checks the allowlist)
    - clinician_id: legacy alias of practitioner_id
    - start_at, end_at: requested absolute instants
    - tz: timezone hint supplied by the booking page
    - patient_*: patient snapshot as submitted
    - appointment_*: appointment block chosen on the booking page
    - notification_lock_at: set by the first pipeline run; later runs no-op
    - notification_sent_at: set once after the notification step
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.PROTECT,
        related_name='booking_requests'
    )
    practitioner_id = models.CharField(max_length=64, blank=True, default='')
    clinician_id = models.CharField(max_length=64, blank=True, default='')
    start_at = models.DateTimeField(blank=True, null=True)
    end_at = models.DateTimeField(blank=True, null=True)
    tz = models.CharField(max_length=64, default='Europe/Prague')
    locale = models.CharField(max_length=10, blank=True, default='')
    kind = models.CharField(max_length=50, default='new')

    # Patient snapshot
    patient_first_name = models.CharField(max_length=100, blank=True, default='')
    patient_last_name = models.CharField(max_length=100, blank=True, default='')
    patient_birth_date = models.DateField(blank=True, null=True)
    patient_email = models.CharField(max_length=255, blank=True, default='')
    patient_email_normalized = models.CharField(max_length=255, blank=True, default='')
    patient_phone = models.CharField(max_length=50, blank=True, default='')
    patient_phone_normalized = models.CharField(max_length=50, blank=True, default='')
    patient_address = models.TextField(blank=True, default='')
    patient_consent_to_treatment = models.BooleanField(default=False)

    # Appointment block
    appointment_minutes = models.PositiveIntegerField()
    appointment_label = models.CharField(max_length=255, blank=True, default='')
    appointment_price_text = models.CharField(max_length=100, blank=True, default='')
    appointment_description = models.TextField(blank=True, default='')

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='booking_requests'
    )
    status = models.CharField(
        max_length=20,
        choices=BookingRequestStatusChoices.choices,
        default=BookingRequestStatusChoices.PENDING
    )
    rejection_reason = models.CharField(max_length=500, blank=True, default='')

    # Resolution outputs
    appointment = models.OneToOneField(
        'clinical.Appointment',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='booking_request'
    )
    patient = models.ForeignKey(
        'clinical.Patient',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='booking_requests'
    )
    intake_invite = models.ForeignKey(
        'intake.IntakeInvite',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='booking_requests'
    )
    pre_assessment_url = models.URLField(max_length=1000, blank=True, default='')
    source = models.CharField(
        max_length=30,
        choices=BookingRequestSourceChoices.choices,
        default=BookingRequestSourceChoices.PUBLIC_API
    )

    notification_lock_at = models.DateTimeField(blank=True, null=True)
    notification_sent_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'booking_request'
        verbose_name = 'Booking Request'
        verbose_name_plural = 'Booking Requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['clinic', 'status'], name='idx_booking_req_status'),
            models.Index(fields=['requester', 'created_at'], name='idx_booking_req_requester'),
        ]

    def __str__(self):
        return f"BookingRequest {self.id} ({self.status})"

    @property
    def requested_practitioner_id(self):
        return (self.practitioner_id or '').strip() or (self.clinician_id or '').strip()

    @property
    def is_pending(self):
        return self.status == BookingRequestStatusChoices.PENDING
