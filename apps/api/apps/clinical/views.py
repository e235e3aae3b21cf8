"""
Direct appointment scheduling for clinic staff.

POST /api/v1/clinical/clinics/<clinic_id>/appointments
"""
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authz.permissions import IsActiveClinicMember, IsNotGuest
from apps.clinical.permissions import require_appointment_flags
from apps.clinical.reservation import ReservationError, reserve_appointment
from apps.clinical.serializers import AppointmentCreateSerializer, AppointmentSerializer
from apps.core.errors import error_for_code
from apps.core.observability import get_sanitized_logger

logger = get_sanitized_logger(__name__)


class ClinicAppointmentCreateView(APIView):
    """
    Create an appointment on behalf of the clinic.

    Requires an active clinic membership; flag requirements depend on the
    kind and on whether a closure override is requested.
    """
    permission_classes = [IsAuthenticated, IsNotGuest, IsActiveClinicMember]

    def post(self, request, clinic_id):
        serializer = AppointmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        require_appointment_flags(
            request.clinic_membership,
            data['kind'],
            data['allow_closed_override'],
        )

        try:
            appointment = reserve_appointment(
                clinic_id,
                kind=data['kind'],
                start=data['start'],
                end=data['end'],
                practitioner_id=data['practitioner_id'],
                patient_id=data['patient_id'],
                service_id=data['service_id'],
                actor=request.user,
                allow_closed_override=data['allow_closed_override'],
            )
        except ReservationError as exc:
            raise error_for_code(exc.code, exc.message)

        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)
