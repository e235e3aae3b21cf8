"""
Intake models: intake_session, intake_invite
"""
import uuid
from django.db import models


class IntakeSessionStatusChoices(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    SUBMITTED = 'submitted', 'Submitted'


class IntakeSession(models.Model):
    """
    Pre-assessment questionnaire session for an appointment.

    Created as a draft when a public booking is approved; the patient
    reaches it through a single-use IntakeInvite link.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='intake_sessions'
    )
    appointment = models.ForeignKey(
        'clinical.Appointment',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='intake_sessions'
    )
    patient = models.ForeignKey(
        'clinical.Patient',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='intake_sessions'
    )
    practitioner = models.ForeignKey(
        'authz.Practitioner',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='intake_sessions'
    )
    status = models.CharField(
        max_length=20,
        choices=IntakeSessionStatusChoices.choices,
        default=IntakeSessionStatusChoices.DRAFT
    )
    flow_id = models.CharField(max_length=50, blank=True, default='')
    flow_version = models.CharField(max_length=20, default='v1')
    answers = models.JSONField(default=dict, blank=True)
    created_from = models.CharField(max_length=20, blank=True, default='')
    submitted_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'intake_session'
        verbose_name = 'Intake Session'
        verbose_name_plural = 'Intake Sessions'
        indexes = [
            models.Index(fields=['clinic', 'status'], name='idx_intake_session_status'),
        ]

    def __str__(self):
        return f"IntakeSession {self.id} ({self.status})"


class IntakeInvite(models.Model):
    """
    Single-use link to an intake session.

    Only the sha256 hash of the raw token is stored. The first consume
    claims the invite and binds it to a session; later consumes resume that
    session. Submitting the session marks the invite used.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='intake_invites'
    )
    appointment = models.ForeignKey(
        'clinical.Appointment',
        on_delete=models.CASCADE,
        related_name='intake_invites'
    )
    patient = models.ForeignKey(
        'clinical.Patient',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='intake_invites'
    )
    patient_email_normalized = models.CharField(max_length=255, blank=True, default='')
    token_hash = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    used_at = models.DateTimeField(blank=True, null=True)
    intake_session = models.ForeignKey(
        IntakeSession,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='issued_invites',
        help_text='Session prepared when the invite was issued'
    )
    claimed_session = models.ForeignKey(
        IntakeSession,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='claimed_invites'
    )
    claimed_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'intake_invite'
        verbose_name = 'Intake Invite'
        verbose_name_plural = 'Intake Invites'
        indexes = [
            models.Index(fields=['clinic', 'appointment'], name='idx_intake_invite_appt'),
        ]

    def __str__(self):
        return f"IntakeInvite {self.id}"
