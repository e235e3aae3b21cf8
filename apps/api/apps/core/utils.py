"""Normalization and masking helpers for patient contact data."""
import re
from datetime import datetime, timezone as dt_timezone
from typing import Iterable, List, Optional


def clean_str(value) -> str:
    """Coerce to a stripped string; None becomes ''."""
    if value is None:
        return ''
    return str(value).strip()


def normalize_email(email) -> str:
    """
    Normalize email for matching: trimmed and lower-cased.

    Example: '  Jane.Doe@Example.COM ' -> 'jane.doe@example.com'
    """
    return clean_str(email).lower()


def normalize_phone(phone) -> str:
    """
    Normalize phone for matching.

    Keeps digits and a single leading '+'. No country code is inferred.
    Example: '+420 (601) 123-456' -> '+420601123456'
    """
    raw = clean_str(phone)
    if not raw:
        return ''

    cleaned = re.sub(r'[^\d+]', '', raw)
    digits = cleaned.replace('+', '')
    if cleaned.startswith('+'):
        return '+' + digits
    return digits


def build_full_name(first_name, last_name) -> str:
    return ' '.join(p for p in (clean_str(first_name), clean_str(last_name)) if p)


def build_search_tokens(parts: Iterable) -> List[str]:
    """
    Search tokens for patient lookup.

    Lower-cased whitespace-split tokens of length >= 2, de-duplicated,
    first-seen order.
    """
    tokens = []
    seen = set()
    for part in parts:
        for token in clean_str(part).lower().split():
            if len(token) >= 2 and token not in seen:
                seen.add(token)
                tokens.append(token)
    return tokens


def mask_email(email: Optional[str]) -> str:
    """
    Redact email for logs and delivery records.

    Keeps the first character and everything from the character before '@'.
    Example: john.doe@example.com -> j***e@example.com
    Addresses with a local part shorter than two characters become '***'.
    """
    value = clean_str(email)
    at = value.find('@')
    if at <= 1:
        return '***'
    return f'{value[0]}***{value[at - 1:]}'


def datetime_from_epoch_millis(millis) -> datetime:
    """
    Epoch milliseconds to an aware UTC datetime.

    Raises:
        ValueError: outside the range the platform can represent
    """
    try:
        return datetime.fromtimestamp(millis / 1000, tz=dt_timezone.utc)
    except (OverflowError, OSError):
        raise ValueError('Timestamp out of range')
