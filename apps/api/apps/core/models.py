"""
Core models: clinic tenant.
"""
import uuid
from django.db import models


class Clinic(models.Model):
    """
    A clinic tenant. Every scheduling record belongs to exactly one clinic.

    Fields:
    - id: UUID PK
    - name: display name used in patient-facing messages
    - slug: unique, URL-safe
    - inbox_email: clinic inbox for booking alerts (nullable)
    - logo_url: branding for notifications (nullable)
    - is_active
    - created_at, updated_at
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)
    inbox_email = models.EmailField(blank=True, null=True)
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clinic'
        verbose_name = 'Clinic'
        verbose_name_plural = 'Clinics'
        indexes = [
            models.Index(fields=['is_active'], name='idx_clinic_active'),
        ]

    def __str__(self):
        return self.name
