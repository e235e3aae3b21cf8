"""
Public availability endpoint.

GET /public/clinics/<clinic_id>/availability

No authentication. Rate limited per IP.
"""
import time

from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.exceptions import APIException
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from apps.core.observability import get_sanitized_logger, metrics

from .services import get_public_availability

logger = get_sanitized_logger(__name__)

AVAILABILITY_QUERY_PARAMS = (
    'practitioner_id',
    'service_id',
    'range_start',
    'range_end',
    'range_start_ms',
    'range_end_ms',
    'tz',
    'corporate_slug',
    'corporate_code',
    'purpose',
)


class PublicAvailabilityThrottle(AnonRateThrottle):
    """Availability queries per IP."""
    scope = 'public_availability'


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([PublicAvailabilityThrottle])
def public_availability(request, clinic_id):
    start_time = time.time()
    params = {key: request.query_params.get(key) for key in AVAILABILITY_QUERY_PARAMS}

    try:
        result = get_public_availability(clinic_id, params)
    except APIException as exc:
        metrics.availability_requests_total.labels(result=getattr(exc, 'code', 'error')).inc()
        raise

    metrics.availability_requests_total.labels(result='success').inc()
    logger.info(
        'Public availability served',
        extra={
            'clinic_id': str(clinic_id),
            'slot_count': len(result['slots']),
            'duration_ms': int((time.time() - start_time) * 1000),
        }
    )
    return Response(result)
