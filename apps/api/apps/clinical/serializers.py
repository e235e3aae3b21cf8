"""
Clinical serializers for direct appointment creation.
"""
from datetime import timezone as dt_timezone

from django.utils import timezone
from rest_framework import serializers

from apps.clinical.models import Appointment, AppointmentKindChoices
from apps.core.utils import datetime_from_epoch_millis


class AppointmentCreateSerializer(serializers.Serializer):
    """
    Input for POST /api/v1/clinical/clinics/<clinic_id>/appointments.

    Times are given either as start_ms/end_ms (epoch millis) or as
    start/end ISO datetimes; both of one pair, never mixed.
    """
    start_ms = serializers.IntegerField(required=False)
    end_ms = serializers.IntegerField(required=False)
    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)
    kind = serializers.ChoiceField(
        choices=AppointmentKindChoices.choices,
        default=AppointmentKindChoices.FOLLOWUP
    )
    patient_id = serializers.CharField(required=False, allow_blank=True, default='')
    service_id = serializers.CharField(required=False, allow_blank=True, default='')
    practitioner_id = serializers.CharField(required=False, allow_blank=True, default='')
    allow_closed_override = serializers.BooleanField(default=False)

    def validate(self, attrs):
        has_ms = 'start_ms' in attrs or 'end_ms' in attrs
        has_iso = 'start' in attrs or 'end' in attrs

        if has_ms and has_iso:
            raise serializers.ValidationError('Provide start_ms/end_ms or start/end, not both.')
        if has_ms:
            if 'start_ms' not in attrs or 'end_ms' not in attrs:
                raise serializers.ValidationError('start_ms and end_ms are both required.')
            try:
                attrs['start'] = datetime_from_epoch_millis(attrs.pop('start_ms'))
                attrs['end'] = datetime_from_epoch_millis(attrs.pop('end_ms'))
            except ValueError:
                raise serializers.ValidationError('start_ms/end_ms are out of range.')
        elif has_iso:
            if 'start' not in attrs or 'end' not in attrs:
                raise serializers.ValidationError('start and end are both required.')
            for key in ('start', 'end'):
                if timezone.is_naive(attrs[key]):
                    attrs[key] = timezone.make_aware(attrs[key], dt_timezone.utc)
        else:
            raise serializers.ValidationError('start_ms/end_ms or start/end are required.')

        return attrs


class AppointmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Appointment
        fields = [
            'id',
            'clinic_id',
            'practitioner_id',
            'patient_id',
            'kind',
            'service_id',
            'service_name',
            'start',
            'end',
            'status',
            'patient_name',
            'practitioner_name',
            'created_from',
            'created_at',
        ]
        read_only_fields = fields
