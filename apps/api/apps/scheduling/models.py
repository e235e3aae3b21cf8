"""
Scheduling models: public_booking_settings, closure, busy_block
"""
import uuid
from django.db import models
from django.conf import settings


class PublicBookingSettings(models.Model):
    """
    Per-clinic schedule configuration used by public availability and booking.

    Fields:
    - clinic_id: FK -> clinic (unique)
    - timezone: IANA zone, default Europe/Prague
    - slot_step_minutes, min_notice_minutes, max_advance_days: nullable,
      defaults 15 / 0 / 365 applied when building ScheduleConfig
    - weekly_hours: {"mon": [{"start": "09:00", "end": "12:00"}], ...}
    - opening_hours: legacy shape, read only when weekly_hours is empty
    - corporate_programs: [{"corp_slug", "display_name", "mode", "days"}]
      mode is LINK_ONLY or CODE_UNLOCK; days are YYYY-MM-DD dates or
      weekday keys
    - practitioners: public allowlist; entries are {"id", "display_name"}
      objects, bare id strings, or legacy 'id: "..."' strings
    - public_base_url: base for intake deep links
    - clinic_display_name, logo_url, contact_url: notification branding
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.OneToOneField(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='public_booking_settings'
    )
    timezone = models.CharField(max_length=64, default='Europe/Prague')
    slot_step_minutes = models.PositiveSmallIntegerField(blank=True, null=True)
    min_notice_minutes = models.PositiveIntegerField(blank=True, null=True)
    max_advance_days = models.PositiveIntegerField(blank=True, null=True)
    weekly_hours = models.JSONField(default=dict, blank=True)
    opening_hours = models.JSONField(default=dict, blank=True)
    corporate_programs = models.JSONField(default=list, blank=True)
    practitioners = models.JSONField(default=list, blank=True)
    public_base_url = models.URLField(max_length=500, blank=True, default='')
    clinic_display_name = models.CharField(max_length=255, blank=True, default='')
    logo_url = models.URLField(max_length=500, blank=True, default='')
    contact_url = models.URLField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'public_booking_settings'
        verbose_name = 'Public Booking Settings'
        verbose_name_plural = 'Public Booking Settings'

    def __str__(self):
        return f"Public booking settings ({self.clinic_id})"


class Closure(models.Model):
    """
    Clinic-wide closure over an absolute half-open range [from_at, to_at).

    Active closures block all slots and refuse reservations unless the
    caller holds settings.write and asks for an override.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='closures'
    )
    from_at = models.DateTimeField()
    to_at = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_by_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='created_closures'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'closure'
        verbose_name = 'Closure'
        verbose_name_plural = 'Closures'
        indexes = [
            models.Index(fields=['clinic', 'is_active', 'from_at'], name='idx_closure_clinic_from'),
        ]

    def __str__(self):
        return f"Closure {self.from_at:%Y-%m-%d %H:%M} - {self.to_at:%Y-%m-%d %H:%M}"


class BusyBlockStatusChoices(models.TextChoices):
    ACTIVE = 'active', 'Active'
    BOOKED = 'booked', 'Booked'
    CANCELLED = 'cancelled', 'Cancelled'


class BusyBlockScopeChoices(models.TextChoices):
    """Empty scope marks rows written before scope existed."""
    CLINIC = 'clinic', 'Clinic'
    PRACTITIONER = 'practitioner', 'Practitioner'


class BusyBlockSourceChoices(models.TextChoices):
    PUBLIC = 'public', 'Public booking'
    RESERVATION = 'reservation', 'Reservation'
    MANUAL = 'manual', 'Manual'


class BusyBlock(models.Model):
    """
    Busy interval [start_at, end_at) that removes slots from availability.

    Clinic-scoped blocks apply to every practitioner. Practitioner-scoped
    blocks apply only to that practitioner. Rows with an empty scope are
    classified on load (see apps.scheduling.busy.classify_scope).

    A block linked to an appointment mirrors it; there is at most one
    such block per appointment and it is deleted with the appointment.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='busy_blocks'
    )
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=BusyBlockStatusChoices.choices,
        default=BusyBlockStatusChoices.ACTIVE
    )
    scope = models.CharField(
        max_length=20,
        choices=BusyBlockScopeChoices.choices,
        blank=True,
        default=''
    )
    kind = models.CharField(max_length=50, blank=True, default='')
    practitioner = models.ForeignKey(
        'authz.Practitioner',
        on_delete=models.CASCADE,
        blank=True,
        null=True,
        related_name='busy_blocks'
    )
    clinician_id = models.CharField(
        max_length=64,
        blank=True,
        default='',
        help_text='Legacy practitioner reference from older rows'
    )
    appointment = models.OneToOneField(
        'clinical.Appointment',
        on_delete=models.CASCADE,
        blank=True,
        null=True,
        related_name='busy_block'
    )
    booking_request = models.ForeignKey(
        'booking.BookingRequest',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='busy_blocks'
    )
    source = models.CharField(
        max_length=20,
        choices=BusyBlockSourceChoices.choices,
        default=BusyBlockSourceChoices.MANUAL
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'busy_block'
        verbose_name = 'Busy Block'
        verbose_name_plural = 'Busy Blocks'
        indexes = [
            models.Index(fields=['clinic', 'start_at'], name='idx_busy_block_clinic_start'),
            models.Index(fields=['clinic', 'practitioner', 'start_at'], name='idx_busy_block_prac_start'),
        ]

    def __str__(self):
        return f"BusyBlock {self.start_at:%Y-%m-%d %H:%M} ({self.scope or 'legacy'})"
