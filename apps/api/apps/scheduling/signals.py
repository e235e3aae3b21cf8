"""
Scheduling signals - keep appointment busy blocks in step with appointments.

Deleting an appointment removes its block through the CASCADE on
BusyBlock.appointment.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.clinical.models import Appointment

from .services import upsert_appointment_block


@receiver(post_save, sender=Appointment)
def on_appointment_saved(sender, instance, **kwargs):
    upsert_appointment_block(instance)
