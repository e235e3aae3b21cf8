"""
Booking signals - enqueue resolution when a booking request is created.
"""
from functools import partial

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import BookingRequest
from .tasks import resolve_booking_request_task


@receiver(post_save, sender=BookingRequest)
def on_booking_request_created(sender, instance, created, **kwargs):
    """
    Enqueue resolution once the creating transaction commits.
    """
    if created:
        transaction.on_commit(partial(resolve_booking_request_task.delay, str(instance.id)))
