"""
Booking serializers.
"""
from rest_framework import serializers

from .models import BookingRequest


class BookingRequestStatusSerializer(serializers.ModelSerializer):
    """Status view returned to the requester."""
    booking_request_id = serializers.UUIDField(source='id', read_only=True)
    appointment_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = BookingRequest
        fields = [
            'booking_request_id',
            'clinic_id',
            'status',
            'rejection_reason',
            'appointment_id',
            'start_at',
            'end_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
