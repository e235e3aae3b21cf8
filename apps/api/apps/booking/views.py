"""
Public booking endpoints.

POST /api/v1/booking/clinics/<clinic_id>/requests
GET  /api/v1/booking/requests/<booking_request_id>

Both require an authenticated caller; guest identities from
/public/guest-session are accepted.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import APIException
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle

from apps.core.errors import InvalidArgument, NotFound
from apps.core.observability import get_sanitized_logger, metrics

from .models import BookingRequest
from .serializers import BookingRequestStatusSerializer
from .services import create_booking_request

logger = get_sanitized_logger(__name__)


class BookingRequestThrottle(UserRateThrottle):
    """Booking submissions per user."""
    scope = 'booking_requests'


class BookingBurstThrottle(UserRateThrottle):
    """Short-window burst limit per user."""
    scope = 'booking_burst'


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([BookingBurstThrottle, BookingRequestThrottle])
def create_booking_request_view(request, clinic_id):
    """Returns {"booking_request_id": ..., "status": "pending"}."""
    if not isinstance(request.data, dict):
        raise InvalidArgument('Expected a JSON object.')

    try:
        booking_request = create_booking_request(clinic_id, request.user, request.data)
    except APIException as exc:
        metrics.booking_requests_created_total.labels(result=getattr(exc, 'code', 'error')).inc()
        raise

    return Response(
        {
            'booking_request_id': str(booking_request.id),
            'status': booking_request.status,
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def booking_request_status(request, booking_request_id):
    """Status of a booking request; visible to its requester only."""
    booking_request = BookingRequest.objects.filter(
        id=booking_request_id,
        requester=request.user,
    ).first()
    if booking_request is None:
        raise NotFound('Booking request not found.')
    return Response(BookingRequestStatusSerializer(booking_request).data)
