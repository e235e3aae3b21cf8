"""
Public intake endpoints (no authentication; the invite token is the credential).

POST /public/clinics/<clinic_id>/intake/consume
POST /public/clinics/<clinic_id>/intake/submit
"""
from rest_framework import serializers
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from .services import consume_intake_invite, submit_intake_session


class IntakeConsumeThrottle(AnonRateThrottle):
    """Token guesses per IP."""
    scope = 'intake_consume'


class IntakeTokenSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=200)


class IntakeSubmitSerializer(IntakeTokenSerializer):
    answers = serializers.DictField(required=False, default=dict)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([IntakeConsumeThrottle])
def consume_invite(request, clinic_id):
    """Returns {"session_id": ..., "resumed": bool}."""
    serializer = IntakeTokenSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    session, resumed = consume_intake_invite(clinic_id, serializer.validated_data['token'])
    return Response({'session_id': str(session.id), 'resumed': resumed})


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([IntakeConsumeThrottle])
def submit_intake(request, clinic_id):
    serializer = IntakeSubmitSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    session = submit_intake_session(
        clinic_id,
        serializer.validated_data['token'],
        serializer.validated_data['answers'],
    )
    return Response({'session_id': str(session.id), 'status': session.status})
