"""
Guest session endpoint.

Public booking requires an authenticated caller. Visitors without an
account get a guest identity and a JWT pair from this endpoint.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.tokens import RefreshToken

from apps.core.observability import get_sanitized_logger, log_domain_event

from .models import User

logger = get_sanitized_logger(__name__)


class GuestSessionThrottle(AnonRateThrottle):
    """Guest identities per IP."""
    scope = 'guest_sessions'


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([GuestSessionThrottle])
def create_guest_session(request):
    """
    POST /public/guest-session

    Returns {"access": ..., "refresh": ..., "user_id": ...}.
    """
    user = User.objects.create_guest()
    refresh = RefreshToken.for_user(user)

    log_domain_event(
        'auth.guest_session.created',
        entity_type='User',
        entity_id=str(user.id),
        result='success',
    )

    return Response(
        {
            'access': str(refresh.access_token),
            'refresh': str(refresh),
            'user_id': str(user.id),
        },
        status=status.HTTP_201_CREATED,
    )
