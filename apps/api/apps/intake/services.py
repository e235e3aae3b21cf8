"""
Intake invite lifecycle: issue, consume, mark used.

Raw tokens leave this module only inside the deep link; the database
stores the sha256 hash (base64url, unpadded).
"""
import base64
import hashlib
import secrets
from datetime import timedelta
from urllib.parse import quote

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.errors import FailedPrecondition, InvalidArgument, NotFound
from apps.core.observability import get_sanitized_logger, log_domain_event, metrics
from apps.core.utils import clean_str

from .models import IntakeInvite, IntakeSession, IntakeSessionStatusChoices

logger = get_sanitized_logger(__name__)

TOKEN_BYTES = 32


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode('ascii')


def generate_token(nbytes: int = TOKEN_BYTES) -> str:
    return _b64url(secrets.token_bytes(nbytes))


def hash_token(token: str) -> str:
    return _b64url(hashlib.sha256(token.encode('utf-8')).digest())


def build_intake_start_url(base_url: str, clinic_id, token: str, use_hash_routing: bool = True) -> str:
    """
    Deep link to the intake start page.

    Example: https://book.example.com/#/intake/start?c=<clinic>&t=<token>
    """
    base = clean_str(base_url).rstrip('/') or settings.PUBLIC_APP_BASE_URL.rstrip('/')
    c = quote(str(clinic_id), safe='')
    t = quote(token, safe='')
    route = '/#/intake/start' if use_hash_routing else '/intake/start'
    return f'{base}{route}?c={c}&t={t}'


def create_intake_session(appointment, flow_id: str = '', created_from: str = '') -> IntakeSession:
    """Draft session for an appointment."""
    return IntakeSession.objects.create(
        clinic_id=appointment.clinic_id,
        appointment=appointment,
        patient_id=appointment.patient_id,
        practitioner_id=appointment.practitioner_id,
        status=IntakeSessionStatusChoices.DRAFT,
        flow_id=clean_str(flow_id) or settings.INTAKE_DEFAULT_FLOW_ID,
        created_from=created_from,
    )


def issue_intake_invite(appointment, intake_session=None, patient_email_normalized: str = '', ttl_hours=None):
    """
    Issue a single-use invite for an appointment.

    Returns:
        (invite, raw_token). The raw token is not stored.
    """
    ttl_hours = ttl_hours if ttl_hours is not None else settings.INTAKE_INVITE_TTL_HOURS
    raw_token = generate_token()
    invite = IntakeInvite.objects.create(
        clinic_id=appointment.clinic_id,
        appointment=appointment,
        patient_id=appointment.patient_id,
        patient_email_normalized=patient_email_normalized,
        token_hash=hash_token(raw_token),
        expires_at=timezone.now() + timedelta(hours=ttl_hours),
        intake_session=intake_session,
    )
    metrics.intake_invites_total.labels(action='issued').inc()
    return invite, raw_token


def consume_intake_invite(clinic_id, token: str):
    """
    Exchange an invite token for its intake session.

    The first consume claims the invite; later consumes resume the same
    session even after expiry. Expiry is enforced only for unclaimed
    invites, and submitted invites are refused.

    Returns:
        (session, resumed)
    """
    token = clean_str(token)
    if not token:
        raise InvalidArgument('Missing clinic or token.')

    token_hash = hash_token(token)
    with transaction.atomic():
        invite = (
            IntakeInvite.objects
            .select_for_update()
            .filter(clinic_id=clinic_id, token_hash=token_hash)
            .first()
        )
        if invite is None:
            metrics.intake_invites_total.labels(action='invalid').inc()
            raise NotFound('Invite not found or invalid.')

        if invite.used_at is not None:
            raise FailedPrecondition('This link has already been submitted.')

        if invite.claimed_session_id is not None:
            metrics.intake_invites_total.labels(action='resumed').inc()
            return invite.claimed_session, True

        now = timezone.now()
        if invite.expires_at < now:
            metrics.intake_invites_total.labels(action='expired').inc()
            raise FailedPrecondition('This link has expired.')

        session = invite.intake_session
        if session is None or session.status != IntakeSessionStatusChoices.DRAFT:
            session = IntakeSession.objects.create(
                clinic_id=invite.clinic_id,
                appointment_id=invite.appointment_id,
                patient_id=invite.patient_id,
                status=IntakeSessionStatusChoices.DRAFT,
                flow_id=settings.INTAKE_DEFAULT_FLOW_ID,
            )

        invite.claimed_session = session
        invite.claimed_at = now
        invite.save(update_fields=['claimed_session', 'claimed_at'])

    metrics.intake_invites_total.labels(action='consumed').inc()
    log_domain_event(
        'intake.invite.claimed',
        entity_type='IntakeInvite',
        entity_id=str(invite.id),
        entity_ids={'clinic_id': str(clinic_id), 'intake_session_id': str(session.id)},
        result='success',
    )
    return session, False


def mark_invite_used(session: IntakeSession):
    """Submit a session and close every invite that claimed it."""
    now = timezone.now()
    with transaction.atomic():
        session.status = IntakeSessionStatusChoices.SUBMITTED
        session.submitted_at = now
        session.save(update_fields=['status', 'submitted_at', 'updated_at'])
        updated = IntakeInvite.objects.filter(claimed_session=session, used_at__isnull=True).update(used_at=now)
    logger.info(
        'Intake session submitted',
        extra={'intake_session_id': str(session.id), 'invites_closed': updated}
    )
    return updated


def submit_intake_session(clinic_id, token: str, answers: dict) -> IntakeSession:
    """Store answers on the session claimed by ``token`` and submit it."""
    token = clean_str(token)
    if not token:
        raise InvalidArgument('Missing clinic or token.')

    invite = (
        IntakeInvite.objects
        .select_related('claimed_session')
        .filter(clinic_id=clinic_id, token_hash=hash_token(token))
        .first()
    )
    if invite is None:
        raise NotFound('Invite not found or invalid.')
    if invite.used_at is not None:
        raise FailedPrecondition('This link has already been submitted.')
    if invite.claimed_session is None:
        raise FailedPrecondition('Open the intake link before submitting.')

    session = invite.claimed_session
    session.answers = answers
    session.save(update_fields=['answers', 'updated_at'])
    mark_invite_used(session)
    return session
