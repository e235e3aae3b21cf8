"""
Tests for intake invites.

Covers:
1. Token hashing and deep-link format
2. First consume claims the invite; later consumes resume
3. Expired and submitted invites are refused
4. Submitting closes the invite
5. Public consume/submit endpoints
"""
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from django.utils import timezone
from rest_framework import status

from apps.clinical.models import AppointmentKindChoices
from apps.clinical.reservation import reserve_appointment
from apps.core.errors import FailedPrecondition, InvalidArgument, NotFound
from apps.intake.models import IntakeInvite, IntakeSession, IntakeSessionStatusChoices
from apps.intake.services import (
    build_intake_start_url,
    consume_intake_invite,
    create_intake_session,
    hash_token,
    issue_intake_invite,
    submit_intake_session,
)

START = datetime(2030, 1, 7, 9, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def appointment(clinic, practitioner, patient):
    return reserve_appointment(
        clinic.id,
        kind=AppointmentKindChoices.NEW,
        start=START,
        end=START + timedelta(hours=1),
        practitioner_id=str(practitioner.id),
        patient_id=str(patient.id),
        service_id='np',
    )


@pytest.fixture
def invite(appointment):
    """(invite, raw_token, session) for a fresh invite."""
    session = create_intake_session(appointment, created_from='publicBooking')
    invite, token = issue_intake_invite(appointment, intake_session=session, patient_email_normalized='eva@example.com')
    return invite, token, session


class TestTokens:

    def test_hash_is_unpadded_base64url_sha256(self):
        digest = hash_token('abc')

        assert digest == 'ungWv48Bz-pBQUDeXa4iI7ADYaOWF3qctBD_YfIAFa0'
        assert '=' not in digest

    def test_start_url(self):
        url = build_intake_start_url('https://book.example.com/', 'clinic-1', 'a+b/c')

        assert url == 'https://book.example.com/#/intake/start?c=clinic-1&t=a%2Bb%2Fc'

    def test_start_url_without_hash_routing(self):
        url = build_intake_start_url('https://book.example.com', 'c1', 't1', use_hash_routing=False)

        assert url == 'https://book.example.com/intake/start?c=c1&t=t1'

    def test_start_url_falls_back_to_default_base(self, settings):
        settings.PUBLIC_APP_BASE_URL = 'https://default.example.test/'

        assert build_intake_start_url('', 'c1', 't1').startswith('https://default.example.test/#/intake/start')


@pytest.mark.django_db
class TestInviteLifecycle:

    def test_raw_token_not_stored(self, invite):
        row, token, _ = invite

        assert row.token_hash == hash_token(token)
        assert not IntakeInvite.objects.filter(token_hash=token).exists()

    def test_invite_defaults(self, invite, settings):
        row, _, session = invite

        assert row.intake_session == session
        assert session.flow_id == settings.INTAKE_DEFAULT_FLOW_ID
        assert session.status == IntakeSessionStatusChoices.DRAFT
        assert row.expires_at > timezone.now() + timedelta(hours=settings.INTAKE_INVITE_TTL_HOURS - 1)

    def test_first_consume_claims_precreated_session(self, clinic, invite):
        row, token, session = invite

        claimed, resumed = consume_intake_invite(clinic.id, token)

        row.refresh_from_db()
        assert claimed == session
        assert resumed is False
        assert row.claimed_session == session
        assert row.claimed_at is not None

    def test_second_consume_resumes(self, clinic, invite):
        _, token, session = invite
        consume_intake_invite(clinic.id, token)

        claimed, resumed = consume_intake_invite(clinic.id, token)

        assert claimed == session
        assert resumed is True
        assert IntakeSession.objects.count() == 1

    def test_expired_unclaimed_invite_refused(self, clinic, invite):
        row, token, _ = invite
        IntakeInvite.objects.filter(id=row.id).update(expires_at=timezone.now() - timedelta(minutes=1))

        with pytest.raises(FailedPrecondition):
            consume_intake_invite(clinic.id, token)

    def test_claimed_invite_resumes_after_expiry(self, clinic, invite):
        row, token, session = invite
        consume_intake_invite(clinic.id, token)
        IntakeInvite.objects.filter(id=row.id).update(expires_at=timezone.now() - timedelta(minutes=1))

        assert consume_intake_invite(clinic.id, token) == (session, True)

    def test_unknown_token_and_wrong_clinic(self, clinic, invite, db):
        from apps.core.models import Clinic

        _, token, _ = invite
        other = Clinic.objects.create(name='Other', slug='other')

        with pytest.raises(NotFound):
            consume_intake_invite(clinic.id, 'nope')
        with pytest.raises(NotFound):
            consume_intake_invite(other.id, token)
        with pytest.raises(InvalidArgument):
            consume_intake_invite(clinic.id, '  ')

    def test_submit_closes_invite(self, clinic, invite):
        row, token, session = invite
        consume_intake_invite(clinic.id, token)

        submitted = submit_intake_session(clinic.id, token, {'pain_score': 4})

        row.refresh_from_db()
        assert submitted.status == IntakeSessionStatusChoices.SUBMITTED
        assert submitted.answers == {'pain_score': 4}
        assert row.used_at is not None
        with pytest.raises(FailedPrecondition):
            consume_intake_invite(clinic.id, token)
        with pytest.raises(FailedPrecondition):
            submit_intake_session(clinic.id, token, {})

    def test_submit_requires_claim(self, clinic, invite):
        _, token, _ = invite

        with pytest.raises(FailedPrecondition):
            submit_intake_session(clinic.id, token, {})


@pytest.mark.django_db
class TestIntakeEndpoints:

    def test_consume_then_submit(self, api_client, clinic, invite):
        _, token, session = invite
        base = f'/public/clinics/{clinic.id}/intake'

        consumed = api_client.post(f'{base}/consume', {'token': token}, format='json')
        submitted = api_client.post(f'{base}/submit', {'token': token, 'answers': {'ok': True}}, format='json')
        again = api_client.post(f'{base}/consume', {'token': token}, format='json')

        assert consumed.status_code == status.HTTP_200_OK
        assert consumed.data == {'session_id': str(session.id), 'resumed': False}
        assert submitted.status_code == status.HTTP_200_OK
        assert submitted.data['status'] == 'submitted'
        assert again.status_code == status.HTTP_412_PRECONDITION_FAILED
        assert again.data['error'] == 'This link has already been submitted.'

    def test_missing_token(self, api_client, clinic):
        response = api_client.post(f'/public/clinics/{clinic.id}/intake/consume', {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid-argument'

    def test_unknown_token(self, api_client, clinic):
        response = api_client.post(f'/public/clinics/{clinic.id}/intake/consume', {'token': 'x'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'error': 'Invite not found or invalid.', 'code': 'not-found'}
