"""
Clinical models: patient, appointment
"""
import uuid
from django.db import models
from django.conf import settings

from apps.core.utils import build_full_name


# ============================================================================
# Enums
# ============================================================================

class PatientStatusChoices(models.TextChoices):
    ACTIVE = 'active', 'Active'
    ARCHIVED = 'archived', 'Archived'


class CreatedFromChoices(models.TextChoices):
    """Where a patient or appointment record originated."""
    PUBLIC_BOOKING = 'publicBooking', 'Public booking'
    MANUAL = 'manual', 'Manual'


class AppointmentKindChoices(models.TextChoices):
    """
    Appointment kind.

    - ADMIN: staff block without a patient (meetings, admin time)
    - NEW: new patient assessment
    - FOLLOWUP: follow-up visit
    """
    ADMIN = 'admin', 'Admin'
    NEW = 'new', 'New patient'
    FOLLOWUP = 'followup', 'Follow-up'


class AppointmentStatusChoices(models.TextChoices):
    """
    Appointment status.
    - booked -> confirmed | cancelled
    - confirmed -> completed | cancelled | no_show
    - completed, cancelled, no_show are terminal states
    """
    BOOKED = 'booked', 'Booked'
    CONFIRMED = 'confirmed', 'Confirmed'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    NO_SHOW = 'no_show', 'No Show'


# Statuses that occupy the practitioner's time
ACTIVE_APPOINTMENT_STATUSES = [
    AppointmentStatusChoices.BOOKED,
    AppointmentStatusChoices.CONFIRMED,
]


# ============================================================================
# Patient
# ============================================================================

class Patient(models.Model):
    """
    Patient records scoped to a clinic.

    Contact fields are stored raw and normalized. Matching for public
    bookings uses the normalized fields, falling back to the legacy flat
    contact fields carried over from older imports.

    Fields:
    - id: UUID PK
    - clinic_id: FK -> clinic
    - first_name, last_name, full_name, full_name_lower
    - birth_date
    - email, email_normalized, phone, phone_normalized
    - legacy_email, legacy_phone: pre-normalization contact values
    - address, consent_to_treatment
    - search_tokens: lower-cased name/contact tokens for search
    - status: active|archived
    - created_from: publicBooking|manual
    - created_by_user_id: FK -> auth_user nullable
    - created_at, updated_at
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='patients'
    )

    # Identity
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    full_name = models.CharField(max_length=255, blank=True, default='')
    full_name_lower = models.CharField(max_length=255, blank=True, default='')
    birth_date = models.DateField(blank=True, null=True)

    # Contact
    email = models.CharField(max_length=255, blank=True, default='')
    email_normalized = models.CharField(max_length=255, blank=True, default='')
    phone = models.CharField(max_length=50, blank=True, default='')
    phone_normalized = models.CharField(max_length=50, blank=True, default='')
    legacy_email = models.CharField(max_length=255, blank=True, default='')
    legacy_phone = models.CharField(max_length=50, blank=True, default='')
    address = models.TextField(blank=True, default='')
    consent_to_treatment = models.BooleanField(default=False)

    search_tokens = models.JSONField(default=list, blank=True)

    status = models.CharField(
        max_length=20,
        choices=PatientStatusChoices.choices,
        default=PatientStatusChoices.ACTIVE
    )
    created_from = models.CharField(
        max_length=20,
        choices=CreatedFromChoices.choices,
        default=CreatedFromChoices.MANUAL
    )
    created_by_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='created_patients'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patient'
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'
        indexes = [
            models.Index(fields=['clinic', 'last_name', 'first_name'], name='idx_patient_name'),
            models.Index(fields=['clinic', 'email_normalized'], name='idx_patient_email_norm'),
            models.Index(fields=['clinic', 'phone_normalized'], name='idx_patient_phone_norm'),
            models.Index(fields=['clinic', 'full_name_lower'], name='idx_patient_full_name'),
        ]

    def __str__(self):
        return self.display_name or str(self.id)

    @property
    def display_name(self):
        """Best available name: first+last, then stored full name."""
        return build_full_name(self.first_name, self.last_name) or self.full_name.strip()


# ============================================================================
# Appointment
# ============================================================================

class Appointment(models.Model):
    """
    Scheduled appointments.

    Created only through apps.clinical.reservation.reserve_appointment,
    which enforces the no-overlap and closure rules inside a transaction.

    Fields:
    - id: UUID PK
    - clinic_id: FK -> clinic
    - practitioner_id: FK -> practitioner (nullable for admin blocks)
    - patient_id: FK -> patient (nullable for admin blocks)
    - kind: admin|new|followup
    - service_id, service_name
    - start, end: absolute instants, half-open [start, end)
    - status: booked|confirmed|completed|cancelled|no_show
    - patient_name, practitioner_name: denormalized for calendars
    - resource_ids: rooms/equipment ids
    - created_from: publicBooking|manual
    - created_by_user_id: FK -> auth_user nullable
    - created_at, updated_at
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='appointments'
    )
    practitioner = models.ForeignKey(
        'authz.Practitioner',
        on_delete=models.PROTECT,
        blank=True,
        null=True,
        related_name='appointments'
    )
    patient = models.ForeignKey(
        'Patient',
        on_delete=models.PROTECT,
        blank=True,
        null=True,
        related_name='appointments'
    )
    kind = models.CharField(
        max_length=20,
        choices=AppointmentKindChoices.choices,
        default=AppointmentKindChoices.FOLLOWUP
    )
    service_id = models.CharField(max_length=100, blank=True, default='')
    service_name = models.CharField(max_length=255, blank=True, default='')
    start = models.DateTimeField()
    end = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=AppointmentStatusChoices.choices,
        default=AppointmentStatusChoices.BOOKED
    )
    patient_name = models.CharField(max_length=255, blank=True, default='')
    practitioner_name = models.CharField(max_length=255, blank=True, default='')
    resource_ids = models.JSONField(default=list, blank=True)
    created_from = models.CharField(
        max_length=20,
        choices=CreatedFromChoices.choices,
        default=CreatedFromChoices.MANUAL
    )
    created_by_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='created_appointments'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'appointment'
        verbose_name = 'Appointment'
        verbose_name_plural = 'Appointments'
        indexes = [
            models.Index(fields=['clinic', 'practitioner', 'start'], name='idx_appointment_prac_start'),
            models.Index(fields=['clinic', 'start'], name='idx_appointment_start'),
            models.Index(fields=['status'], name='idx_appointment_status'),
        ]

    def __str__(self):
        return f"Appointment {self.start:%Y-%m-%d %H:%M} - {self.patient_name or self.kind}"

    @property
    def is_active(self):
        return self.status in ACTIVE_APPOINTMENT_STATUSES
