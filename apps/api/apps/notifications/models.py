"""
Notification models: notification_settings, notification_log
"""
import uuid
from django.db import models


class NotificationEventChoices(models.TextChoices):
    PATIENT_CONFIRMATION = 'booking.created.patientConfirmation', 'Booking confirmation (patient)'
    CLINICIAN_NOTIFICATION = 'booking.created.clinicianNotification', 'New booking (clinician)'


class RecipientPolicyChoices(models.TextChoices):
    PRACTITIONER = 'practitionerOnAppointment', 'Practitioner on appointment'
    CLINIC_INBOX = 'clinicInbox', 'Clinic inbox'
    BOTH = 'both', 'Both'


class NotificationSettings(models.Model):
    """
    Per-clinic email notification configuration.

    ``events`` maps event id -> config:
        {
            "booking.created.patientConfirmation": {
                "enabled": true,
                "template_id_by_locale": {"en": "booking_patient_confirmation"},
                "recipient_policy": {"mode": "practitionerOnAppointment"}
            }
        }
    Template ids name templates under templates/notifications/.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.OneToOneField(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='notification_settings'
    )
    default_locale = models.CharField(max_length=10, default='en')
    events = models.JSONField(default=dict, blank=True)
    reply_to_email = models.EmailField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notification_settings'
        verbose_name = 'Notification Settings'
        verbose_name_plural = 'Notification Settings'

    def __str__(self):
        return f"Notification settings ({self.clinic_id})"

    def event_config(self, event_id):
        config = (self.events or {}).get(str(event_id))
        return config if isinstance(config, dict) else {}


class NotificationStatusChoices(models.TextChoices):
    ACCEPTED = 'accepted', 'Accepted'
    SKIPPED = 'skipped', 'Skipped'
    ERROR = 'error', 'Error'


class NotificationLog(models.Model):
    """
    One row per notification attempt. ``recipient`` is always redacted.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='notification_logs'
    )
    event_id = models.CharField(max_length=100, choices=NotificationEventChoices.choices)
    appointment = models.ForeignKey(
        'clinical.Appointment',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='notification_logs'
    )
    recipient = models.CharField(max_length=255)
    provider = models.CharField(max_length=50, default='email')
    message_id = models.CharField(max_length=255, blank=True, default='')
    status = models.CharField(max_length=20, choices=NotificationStatusChoices.choices)
    error_message = models.CharField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notification_log'
        verbose_name = 'Notification Log'
        verbose_name_plural = 'Notification Logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['clinic', 'event_id', 'created_at'], name='idx_notif_log_event'),
        ]

    def __str__(self):
        return f"{self.event_id} -> {self.recipient} ({self.status})"
