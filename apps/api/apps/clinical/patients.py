"""
Patient resolution for public bookings.

A booking either reuses an existing patient or creates one. Contact details
alone never merge two people: the matched record must also share the
booking's date of birth.
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from django.db.models import Q

from apps.core.observability import get_sanitized_logger, metrics
from apps.core.utils import (
    build_full_name,
    build_search_tokens,
    clean_str,
    normalize_email,
    normalize_phone,
)

from .models import CreatedFromChoices, Patient

logger = get_sanitized_logger(__name__)


@dataclass
class PatientDetails:
    """Patient snapshot as submitted with a booking."""
    first_name: str
    last_name: str
    birth_date: date
    email: str = ''
    phone: str = ''
    address: str = ''
    consent_to_treatment: bool = False

    @property
    def email_normalized(self) -> str:
        return normalize_email(self.email)

    @property
    def phone_normalized(self) -> str:
        return normalize_phone(self.phone)

    @property
    def full_name(self) -> str:
        return build_full_name(self.first_name, self.last_name)

    @property
    def search_tokens(self):
        return build_search_tokens([self.first_name, self.last_name, self.email_normalized, clean_str(self.phone)])


def _contact_lookups(email_normalized: str, phone_normalized: str) -> List[Dict[str, str]]:
    """Contact filters in match order: email, then phone; normalized before legacy."""
    lookups = []
    if email_normalized:
        lookups.append({'email_normalized': email_normalized})
        lookups.append({'legacy_email__iexact': email_normalized})
    if phone_normalized:
        lookups.append({'phone_normalized': phone_normalized})
        lookups.append({'legacy_phone': phone_normalized})
    return lookups


def find_patient_candidate(clinic_id, email_normalized: str, phone_normalized: str,
                           birth_date: date) -> Optional[Patient]:
    """
    Oldest patient sharing a contact and the date of birth.

    Contacts are tried in order (email, then phone; each in the normalized
    field first and the legacy flat field second). Within one contact, any
    patient whose DOB matches is eligible, not only the oldest record.
    """
    patients = Patient.objects.filter(clinic_id=clinic_id, birth_date=birth_date).order_by('created_at')
    for lookup in _contact_lookups(email_normalized, phone_normalized):
        candidate = patients.filter(**lookup).first()
        if candidate is not None:
            return candidate
    return None


def has_contact_match(clinic_id, email_normalized: str, phone_normalized: str) -> bool:
    lookups = _contact_lookups(email_normalized, phone_normalized)
    if not lookups:
        return False
    query = Q()
    for lookup in lookups:
        query |= Q(**lookup)
    return Patient.objects.filter(query, clinic_id=clinic_id).exists()


def _refresh_patient(patient: Patient, details: PatientDetails) -> Patient:
    patient.first_name = clean_str(details.first_name)
    patient.last_name = clean_str(details.last_name)
    patient.full_name = details.full_name
    patient.full_name_lower = details.full_name.lower()
    patient.search_tokens = details.search_tokens
    patient.email = details.email_normalized
    patient.email_normalized = details.email_normalized
    patient.phone = clean_str(details.phone)
    patient.phone_normalized = details.phone_normalized
    patient.save(update_fields=[
        'first_name', 'last_name', 'full_name', 'full_name_lower', 'search_tokens',
        'email', 'email_normalized', 'phone', 'phone_normalized', 'updated_at',
    ])
    return patient


def resolve_patient(clinic_id, details: PatientDetails):
    """
    Find or create the patient for a public booking.

    Returns:
        (patient, created) tuple.
    """
    candidate = find_patient_candidate(
        clinic_id, details.email_normalized, details.phone_normalized, details.birth_date
    )

    if candidate is not None:
        metrics.patient_resolutions_total.labels(result='matched').inc()
        return _refresh_patient(candidate, details), False

    if has_contact_match(clinic_id, details.email_normalized, details.phone_normalized):
        metrics.patient_resolutions_total.labels(result='dob_mismatch').inc()
        logger.info(
            'Contact matches failed birth date check, creating new patient',
            extra={'clinic_id': str(clinic_id)}
        )

    patient = Patient.objects.create(
        clinic_id=clinic_id,
        first_name=clean_str(details.first_name),
        last_name=clean_str(details.last_name),
        full_name=details.full_name,
        full_name_lower=details.full_name.lower(),
        birth_date=details.birth_date,
        email=details.email_normalized,
        email_normalized=details.email_normalized,
        phone=clean_str(details.phone),
        phone_normalized=details.phone_normalized,
        address=clean_str(details.address),
        consent_to_treatment=details.consent_to_treatment,
        search_tokens=details.search_tokens,
        created_from=CreatedFromChoices.PUBLIC_BOOKING,
    )
    metrics.patient_resolutions_total.labels(result='created').inc()
    return patient, True
