"""
Authz models: auth_user, auth_role, auth_user_role, practitioner, clinic_membership
"""
import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin


# ============================================================================
# User Management
# ============================================================================

class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        return self.create_user(email, password, **extra_fields)

    def create_guest(self):
        """
        Create an anonymous guest identity for public booking.

        Guests authenticate with JWT like any user but have no password and
        no clinic membership.
        """
        guest_id = uuid.uuid4()
        user = self.model(
            id=guest_id,
            email=f'guest-{guest_id.hex}@guest.invalid',
            is_guest=True,
        )
        user.set_unusable_password()
        user.save(using=self._db)
        return user


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom user model for authentication.

    Fields:
    - id: UUID PK
    - email: unique
    - is_guest: anonymous identity issued by the public guest-session endpoint
    - is_active, is_staff
    - created_at, updated_at
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    is_guest = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'auth_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['email'], name='idx_user_email'),
            models.Index(fields=['is_guest'], name='idx_user_guest'),
        ]

    def __str__(self):
        return self.email


# ============================================================================
# Practitioners
# ============================================================================

class Practitioner(models.Model):
    """
    Practitioners (clinicians who can be booked) linked to users.

    Fields:
    - id: UUID PK
    - user_id: FK -> auth_user (unique)
    - clinic_id: FK -> clinic
    - display_name, email
    - weekly_hours: optional staff availability, same shape as clinic
      weekly hours ({"mon": [{"start": "09:00", "end": "12:00"}], ...}).
      Intersected with clinic hours for availability.
    - timezone: optional zone the staff hours are expressed in
    - is_active: inactive practitioners cannot receive appointments
    - created_at, updated_at
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='practitioner'
    )
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='practitioners'
    )
    display_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True, help_text='Address for booking alerts')
    weekly_hours = models.JSONField(default=dict, blank=True)
    timezone = models.CharField(max_length=64, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'practitioner'
        verbose_name = 'Practitioner'
        verbose_name_plural = 'Practitioners'
        indexes = [
            models.Index(fields=['clinic', 'is_active'], name='idx_practitioner_clinic'),
            models.Index(fields=['display_name'], name='idx_practitioner_name'),
        ]

    def __str__(self):
        return self.display_name

    @property
    def alert_email(self):
        return (self.email or self.user.email or '').strip().lower()


# ============================================================================
# Clinic membership
# ============================================================================

class PermissionFlag(models.TextChoices):
    """Per-clinic permission flags stored on a membership."""
    SCHEDULE_READ = 'schedule.read', 'Read schedule'
    SCHEDULE_WRITE = 'schedule.write', 'Write schedule'
    SCHEDULE_MANAGE = 'schedule.manage', 'Manage schedule'
    SETTINGS_WRITE = 'settings.write', 'Write clinic settings'
    PATIENTS_READ = 'patients.read', 'Read patients'


class MembershipStatusChoices(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INVITED = 'invited', 'Invited'
    SUSPENDED = 'suspended', 'Suspended'


class ClinicMembership(models.Model):
    """
    A user's membership in a clinic, with permission flags.

    ``permissions`` maps flag -> bool, e.g. {"schedule.read": true}.
    A membership grants access only when status is active and is_active
    is set.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='clinic_memberships'
    )
    status = models.CharField(
        max_length=20,
        choices=MembershipStatusChoices.choices,
        default=MembershipStatusChoices.ACTIVE
    )
    is_active = models.BooleanField(default=True)
    permissions = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clinic_membership'
        verbose_name = 'Clinic Membership'
        verbose_name_plural = 'Clinic Memberships'
        unique_together = [('clinic', 'user')]

    def __str__(self):
        return f"{self.user.email} @ {self.clinic_id}"

    @property
    def is_usable(self):
        return self.is_active and self.status == MembershipStatusChoices.ACTIVE

    def has_flag(self, flag):
        return self.permissions.get(str(flag)) is True
