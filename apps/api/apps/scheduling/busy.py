"""
Loaders for intervals that remove slots from availability.

Busy blocks written before ``scope`` existed are classified once, here:
an admin block with no practitioner reference is clinic-wide, anything
else belongs to its practitioner.
"""
from datetime import datetime
from typing import List, Optional

from apps.clinical.models import Appointment, AppointmentStatusChoices
from apps.core.utils import clean_str
from apps.scheduling.availability import Interval
from apps.scheduling.models import (
    BusyBlock,
    BusyBlockScopeChoices,
    BusyBlockStatusChoices,
    Closure,
)

LEGACY_CLINIC_KIND = 'admin'


def block_practitioner_ref(block: BusyBlock) -> str:
    """Practitioner id of a block, from the FK or the legacy clinician_id."""
    return clean_str(block.practitioner_id) or clean_str(block.clinician_id)


def classify_scope(block: BusyBlock) -> str:
    """Effective scope of a busy block: 'clinic' or 'practitioner'."""
    if block.scope in (BusyBlockScopeChoices.CLINIC, BusyBlockScopeChoices.PRACTITIONER):
        return block.scope
    if clean_str(block.kind).lower() == LEGACY_CLINIC_KIND and not block_practitioner_ref(block):
        return BusyBlockScopeChoices.CLINIC
    return BusyBlockScopeChoices.PRACTITIONER


def applies_to(block: BusyBlock, practitioner_id: Optional[str]) -> bool:
    if block.status == BusyBlockStatusChoices.CANCELLED:
        return False
    if classify_scope(block) == BusyBlockScopeChoices.CLINIC:
        return True
    wanted = clean_str(practitioner_id)
    return bool(wanted) and block_practitioner_ref(block) == wanted


def _blocks_in_range(clinic_id, range_start: datetime, range_end: datetime):
    return (
        BusyBlock.objects
        .filter(clinic_id=clinic_id, start_at__lt=range_end, end_at__gt=range_start)
        .exclude(status=BusyBlockStatusChoices.CANCELLED)
        .order_by('start_at')
    )


def load_busy(clinic_id, practitioner_id, range_start: datetime, range_end: datetime) -> List[Interval]:
    """
    Busy intervals applicable to a query.

    Clinic-scoped blocks always apply. Practitioner-scoped blocks apply only
    when they belong to ``practitioner_id``; without a practitioner only
    clinic-scoped blocks are returned.
    """
    return [
        Interval(block.start_at, block.end_at)
        for block in _blocks_in_range(clinic_id, range_start, range_end)
        if applies_to(block, practitioner_id)
    ]


def load_clinic_wide_busy(clinic_id, range_start: datetime, range_end: datetime) -> List[Interval]:
    return load_busy(clinic_id, None, range_start, range_end)


def load_closures(clinic_id, range_start: datetime, range_end: datetime) -> List[Interval]:
    closures = Closure.objects.filter(
        clinic_id=clinic_id,
        is_active=True,
        from_at__lt=range_end,
        to_at__gt=range_start,
    ).order_by('from_at')
    return [Interval(c.from_at, c.to_at) for c in closures]


def load_appointment_blocks(clinic_id, practitioner_id, range_start: datetime, range_end: datetime) -> List[Interval]:
    """Non-cancelled appointments of the practitioner that intersect the range."""
    if not clean_str(practitioner_id):
        return []
    appointments = (
        Appointment.objects
        .filter(
            clinic_id=clinic_id,
            practitioner_id=practitioner_id,
            start__lt=range_end,
            end__gt=range_start,
        )
        .exclude(status=AppointmentStatusChoices.CANCELLED)
        .order_by('start')
    )
    return [Interval(a.start, a.end) for a in appointments]
