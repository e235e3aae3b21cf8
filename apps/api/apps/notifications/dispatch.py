"""
Booking notification dispatch.

Sends the patient confirmation and the clinician alert for a new booking.
Every attempt, including skipped ones, is recorded as a NotificationLog
with a redacted recipient. Delivery errors are recorded, never raised.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from email.utils import make_msgid
from typing import Dict, List, Optional
from urllib.parse import urlencode

import pytz
from django.conf import settings
from django.core.mail import EmailMessage
from django.template.loader import render_to_string

from apps.core.observability import get_sanitized_logger, metrics
from apps.core.utils import clean_str, mask_email, normalize_email

from .models import (
    NotificationEventChoices,
    NotificationLog,
    NotificationSettings,
    NotificationStatusChoices,
    RecipientPolicyChoices,
)

logger = get_sanitized_logger(__name__)

PROVIDER = 'email'
DEFAULT_LOCALE = 'en'
ERROR_MESSAGE_LIMIT = 500
GOOGLE_CALENDAR_BASE = 'https://www.google.com/calendar/render'

_TEMPLATE_ID_RE = re.compile(r'^[a-z0-9_]+$')


@dataclass
class BookingEmail:
    """Everything the booking templates need, resolved by the caller."""
    clinic_id: str
    appointment_id: str
    practitioner_id: str
    start: datetime
    end: datetime
    timezone: str
    clinic_name: str
    patient_email: str
    patient_name: str
    practitioner_name: str = ''
    practitioner_email: str = ''
    clinic_inbox_email: str = ''
    service_name: str = ''
    logo_url: str = ''
    contact_url: str = ''
    pre_assessment_url: str = ''
    locale: str = ''


class NotificationDeliveryError(Exception):
    pass


def format_start_time_local(start: datetime, tz_name: str) -> str:
    """E.g. 'Mon, 05 Jan 2026, 09:00' in the clinic zone."""
    local = start.astimezone(pytz.timezone(tz_name))
    return local.strftime('%a, %d %b %Y, %H:%M')


def _google_utc(value: datetime) -> str:
    return value.astimezone(pytz.utc).strftime('%Y%m%dT%H%M%SZ')


def build_google_calendar_url(title: str, start: datetime, end: datetime, details: str = '', location: str = '') -> str:
    query = urlencode({
        'action': 'TEMPLATE',
        'text': title,
        'dates': f'{_google_utc(start)}/{_google_utc(end)}',
        'details': details,
        'location': location,
    })
    return f'{GOOGLE_CALENDAR_BASE}?{query}'


def resolve_template_id(notification_settings: Optional[NotificationSettings], event_id: str, locale_hint: str = '') -> Optional[str]:
    """
    Template for an event, or None when the event is disabled or unconfigured.

    Locale order: hint, clinic default locale, then 'en'.
    """
    if notification_settings is None:
        return None
    config = notification_settings.event_config(event_id)
    if config.get('enabled') is not True:
        return None

    by_locale = config.get('template_id_by_locale') or {}
    locale = (clean_str(locale_hint) or notification_settings.default_locale or DEFAULT_LOCALE).lower()
    return by_locale.get(locale) or by_locale.get(DEFAULT_LOCALE) or None


def recipient_policy(notification_settings: NotificationSettings, event_id: str) -> str:
    policy = notification_settings.event_config(event_id).get('recipient_policy') or {}
    mode = policy.get('mode') if isinstance(policy, dict) else None
    if mode in RecipientPolicyChoices.values:
        return mode
    return RecipientPolicyChoices.PRACTITIONER


def build_template_params(email: BookingEmail) -> Dict[str, str]:
    practitioner_name = clean_str(email.practitioner_name) or 'Your clinician'
    details = email.service_name
    if email.practitioner_name:
        details = f'{details} with {email.practitioner_name}'
    return {
        'clinic_name': email.clinic_name,
        'patient_name': email.patient_name,
        'start_time_local': format_start_time_local(email.start, email.timezone),
        'practitioner_name': practitioner_name,
        'clinician_name': practitioner_name,
        'contact_url': email.contact_url or settings.BOOKING_CONTACT_URL,
        'google_calendar_url': build_google_calendar_url(
            title=f'Appointment at {email.clinic_name or "Clinic"}',
            start=email.start,
            end=email.end,
            details=details.strip(),
        ),
        'pre_assessment_url': email.pre_assessment_url,
        'logo_url': email.logo_url,
        'clinic_id': email.clinic_id,
        'appointment_id': email.appointment_id,
        'practitioner_id': email.practitioner_id,
        'service_name': email.service_name,
        'timezone': email.timezone,
    }


def send_template_email(template_id: str, recipients: List[str], params: Dict[str, str], reply_to: str = '') -> str:
    """
    Render ``notifications/<template_id>.txt`` and send it.

    The first line of the template is ``Subject: ...``. Returns the
    Message-ID of the sent email.
    """
    if not _TEMPLATE_ID_RE.match(template_id):
        raise NotificationDeliveryError(f'Invalid template id: {template_id}')

    rendered = render_to_string(f'notifications/{template_id}.txt', params)
    first_line, _, body = rendered.lstrip().partition('\n')
    subject = first_line.removeprefix('Subject:').strip()

    message_id = make_msgid(domain='bookings')
    message = EmailMessage(
        subject=subject,
        body=body.strip() + '\n',
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
        reply_to=[reply_to] if reply_to else None,
        headers={'Message-ID': message_id},
    )
    sent = message.send(fail_silently=False)
    if not sent:
        raise NotificationDeliveryError('Email backend accepted no messages.')
    return message_id


def write_notification_log(email: BookingEmail, event_id: str, recipient: str, status: str,
                           message_id: str = '', error_message: str = '') -> NotificationLog:
    metrics.notifications_total.labels(event=event_id, status=status).inc()
    return NotificationLog.objects.create(
        clinic_id=email.clinic_id,
        event_id=event_id,
        appointment_id=email.appointment_id,
        recipient=mask_email(recipient),
        provider=PROVIDER,
        message_id=message_id,
        status=status,
        error_message=error_message[:ERROR_MESSAGE_LIMIT],
    )


def _send_and_log(email, event_id, template_id, recipients, params, reply_to) -> NotificationLog:
    try:
        message_id = send_template_email(template_id, recipients, params, reply_to)
    except Exception as exc:
        logger.warning(
            f'Notification send failed: {event_id}',
            exc_info=True,
            extra={'clinic_id': email.clinic_id, 'appointment_id': email.appointment_id}
        )
        return write_notification_log(
            email, event_id, recipients[0], NotificationStatusChoices.ERROR,
            error_message=clean_str(exc) or 'Unknown send error',
        )
    return write_notification_log(
        email, event_id, recipients[0], NotificationStatusChoices.ACCEPTED, message_id=message_id,
    )


def send_booking_notifications(email: BookingEmail) -> List[NotificationLog]:
    """
    Patient confirmation, then the clinician alert per recipient policy.

    Nothing is sent or logged when the booking has no patient email.
    """
    patient_email = normalize_email(email.patient_email)
    if not patient_email:
        logger.info(
            'No patient email supplied; skipping notifications',
            extra={'clinic_id': email.clinic_id, 'appointment_id': email.appointment_id}
        )
        return []

    notification_settings = NotificationSettings.objects.filter(clinic_id=email.clinic_id).first()
    if notification_settings is None:
        logger.warning('Notification settings missing', extra={'clinic_id': email.clinic_id})
    reply_to = notification_settings.reply_to_email if notification_settings else ''

    params = build_template_params(email)
    logs = []

    patient_event = NotificationEventChoices.PATIENT_CONFIRMATION
    template_id = resolve_template_id(notification_settings, patient_event, email.locale)
    if template_id is None:
        logs.append(write_notification_log(
            email, patient_event, patient_email, NotificationStatusChoices.SKIPPED,
            error_message=f'Template not configured or event disabled ({patient_event.value}).',
        ))
    else:
        logs.append(_send_and_log(email, patient_event, template_id, [patient_email], params, reply_to))

    clinician_event = NotificationEventChoices.CLINICIAN_NOTIFICATION
    template_id = resolve_template_id(notification_settings, clinician_event, email.locale)
    if template_id is None:
        return logs

    mode = recipient_policy(notification_settings, clinician_event)
    practitioner_email = normalize_email(email.practitioner_email)
    inbox_email = normalize_email(email.clinic_inbox_email)

    recipients = []
    if mode in (RecipientPolicyChoices.PRACTITIONER, RecipientPolicyChoices.BOTH) and practitioner_email:
        recipients.append(practitioner_email)
    if mode in (RecipientPolicyChoices.CLINIC_INBOX, RecipientPolicyChoices.BOTH) and inbox_email:
        recipients.append(inbox_email)

    if not recipients:
        logs.append(write_notification_log(
            email, clinician_event, practitioner_email or inbox_email or 'unknown',
            NotificationStatusChoices.SKIPPED,
            error_message='No clinician or clinic inbox email found for recipient policy.',
        ))
        return logs

    logs.append(_send_and_log(email, clinician_event, template_id, recipients, params, reply_to))
    return logs
