"""
Integration tests for direct appointment creation.

POST /api/v1/clinical/clinics/<clinic_id>/appointments

Tests membership and flag rules, time input shapes, and the mapping of
reservation failures onto the API error taxonomy.
"""
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from rest_framework import status

from apps.clinical.models import Appointment
from apps.scheduling.models import Closure

START = datetime(2030, 1, 7, 9, 0, tzinfo=dt_timezone.utc)
END = START + timedelta(hours=1)

SCHEDULER_FLAGS = ['schedule.read', 'schedule.write', 'patients.read']


def ms(value):
    return int(value.timestamp() * 1000)


@pytest.mark.django_db
class TestAppointmentCreate:
    """Test POST /api/v1/clinical/clinics/<clinic_id>/appointments."""

    @pytest.fixture(autouse=True)
    def setup(self, clinic, practitioner, patient):
        self.endpoint = f'/api/v1/clinical/clinics/{clinic.id}/appointments'
        self.payload = {
            'kind': 'followup',
            'start_ms': ms(START),
            'end_ms': ms(END),
            'practitioner_id': str(practitioner.id),
            'patient_id': str(patient.id),
            'service_id': 'fu',
        }

    def test_create_with_epoch_millis(self, member_client_factory, patient):
        client, user = member_client_factory(SCHEDULER_FLAGS)

        response = client.post(self.endpoint, self.payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['patient_id'] == patient.id
        assert response.data['created_from'] == 'manual'
        assert Appointment.objects.get().created_by_user == user

    def test_create_with_iso_times(self, member_client_factory):
        client, _ = member_client_factory(SCHEDULER_FLAGS)
        payload = {**self.payload, 'start': START.isoformat(), 'end': END.isoformat()}
        del payload['start_ms'], payload['end_ms']

        response = client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_mixed_time_shapes_rejected(self, member_client_factory):
        client, _ = member_client_factory(SCHEDULER_FLAGS)

        response = client.post(self.endpoint, {**self.payload, 'start': START.isoformat()}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid-argument'

    @pytest.mark.parametrize('start_ms', [10**20, -10**20])
    def test_out_of_range_millis_rejected(self, member_client_factory, start_ms):
        client, _ = member_client_factory(SCHEDULER_FLAGS)
        payload = {**self.payload, 'start_ms': start_ms, 'end_ms': start_ms + 1}

        response = client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid-argument'
        assert response.data['error'] == 'start_ms/end_ms are out of range.'
        assert not Appointment.objects.exists()

    def test_schedule_manage_counts_as_write(self, member_client_factory):
        client, _ = member_client_factory(['schedule.read', 'schedule.manage', 'patients.read'])

        response = client.post(self.endpoint, self.payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    @pytest.mark.parametrize('flags', [
        ['schedule.write', 'patients.read'],
        ['schedule.read', 'patients.read'],
        ['schedule.read', 'schedule.write'],
    ])
    def test_missing_flags_forbidden(self, member_client_factory, flags):
        client, _ = member_client_factory(flags)

        response = client.post(self.endpoint, self.payload, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'permission-denied'
        assert Appointment.objects.count() == 0

    def test_admin_block_without_patients_read(self, member_client_factory):
        client, _ = member_client_factory(['schedule.read', 'schedule.write'])
        payload = {**self.payload, 'kind': 'admin', 'patient_id': '', 'service_id': ''}

        response = client.post(self.endpoint, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['patient_id'] is None

    def test_closure_override_requires_settings_write(self, member_client_factory, clinic):
        Closure.objects.create(clinic=clinic, from_at=START, to_at=END)
        payload = {**self.payload, 'allow_closed_override': True}

        denied, _ = member_client_factory(SCHEDULER_FLAGS)
        allowed, _ = member_client_factory(['settings.write', 'patients.read'])

        assert denied.post(self.endpoint, payload, format='json').status_code == status.HTTP_403_FORBIDDEN
        assert allowed.post(self.endpoint, payload, format='json').status_code == status.HTTP_201_CREATED

    def test_closure_without_override_is_precondition_failure(self, member_client_factory, clinic):
        Closure.objects.create(clinic=clinic, from_at=START, to_at=END)
        client, _ = member_client_factory(SCHEDULER_FLAGS)

        response = client.post(self.endpoint, self.payload, format='json')

        assert response.status_code == status.HTTP_412_PRECONDITION_FAILED
        assert response.data == {'error': 'Appointment overlaps a clinic closure.', 'code': 'failed-precondition'}

    def test_conflict_is_precondition_failure(self, member_client_factory):
        client, _ = member_client_factory(SCHEDULER_FLAGS)
        client.post(self.endpoint, self.payload, format='json')

        response = client.post(self.endpoint, self.payload, format='json')

        assert response.status_code == status.HTTP_412_PRECONDITION_FAILED
        assert response.data['error'] == 'The selected time is no longer available.'

    def test_missing_patient_is_invalid_argument(self, member_client_factory):
        client, _ = member_client_factory(SCHEDULER_FLAGS)

        response = client.post(self.endpoint, {**self.payload, 'patient_id': ''}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid-argument'


@pytest.mark.django_db
class TestAppointmentCreateAccess:

    def endpoint(self, clinic):
        return f'/api/v1/clinical/clinics/{clinic.id}/appointments'

    def test_unauthenticated(self, api_client, clinic):
        response = api_client.post(self.endpoint(clinic), {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_guest_refused(self, guest_client, clinic):
        response = guest_client.post(self.endpoint(clinic), {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.parametrize('membership', [
        {'status': 'suspended'},
        {'status': 'invited'},
        {'is_active': False},
    ])
    def test_unusable_membership_refused(self, member_client_factory, clinic, membership):
        client, _ = member_client_factory(SCHEDULER_FLAGS, **membership)

        response = client.post(self.endpoint(clinic), {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
