"""
Schedule configuration values.

PublicBookingSettings rows carry several historical shapes (legacy opening
hours, camelCase corporate programs, string-encoded practitioner entries).
Everything is normalized here, once, into immutable values that the slot
algorithm consumes without touching the database.
"""
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from django.conf import settings

from apps.core.utils import clean_str

WEEKDAY_KEYS = ('mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun')

DEFAULT_SLOT_STEP_MINUTES = 15
DEFAULT_MIN_NOTICE_MINUTES = 0
DEFAULT_MAX_ADVANCE_DAYS = 365

MODE_LINK_ONLY = 'LINK_ONLY'
MODE_CODE_UNLOCK = 'CODE_UNLOCK'

MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r'^(\d{2}):(\d{2})$')
_LEGACY_ID_RE = re.compile(r'id:\s*"?([^"]+)"?', re.IGNORECASE)
_LEGACY_NAME_RE = re.compile(r'displayName:\s*"?([^"]+)"?', re.IGNORECASE)


@dataclass(frozen=True)
class TimeInterval:
    """Local wall-clock interval [start, end) in minutes since midnight."""
    start: int
    end: int

    def contains(self, start_minute: int, end_minute: int) -> bool:
        return self.start <= start_minute and end_minute <= self.end

    def to_dict(self) -> Dict[str, str]:
        return {'start': format_hhmm(self.start), 'end': format_hhmm(self.end)}


WeeklyHours = Mapping[str, Tuple[TimeInterval, ...]]


@dataclass(frozen=True)
class CorporateProgram:
    slug: str
    display_name: str
    mode: str
    days: FrozenSet[str]

    def covers(self, local_date: date) -> bool:
        """True when the clinic-local date is one of the program's days."""
        return (
            local_date.isoformat() in self.days
            or WEEKDAY_KEYS[local_date.weekday()] in self.days
        )


@dataclass(frozen=True)
class CorporateAccess:
    """A resolved corporate link for one availability query."""
    program: CorporateProgram
    unlocked: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            'corp_slug': self.program.slug,
            'mode': self.program.mode,
            'unlocked': self.unlocked,
        }


@dataclass(frozen=True)
class ScheduleConfig:
    timezone: str
    slot_step_minutes: int = DEFAULT_SLOT_STEP_MINUTES
    min_notice_minutes: int = DEFAULT_MIN_NOTICE_MINUTES
    max_advance_days: int = DEFAULT_MAX_ADVANCE_DAYS
    weekly_hours: WeeklyHours = field(default_factory=dict)
    corporate_programs: Tuple[CorporateProgram, ...] = ()
    practitioner_ids: Tuple[str, ...] = ()
    practitioner_names: Mapping[str, str] = field(default_factory=dict)

    @property
    def has_hours(self) -> bool:
        return any(self.weekly_hours.get(key) for key in WEEKDAY_KEYS)

    def find_program(self, slug: str) -> Optional[CorporateProgram]:
        wanted = clean_str(slug).lower()
        for program in self.corporate_programs:
            if program.slug.lower() == wanted:
                return program
        return None

    def program_for_date(self, local_date: date) -> Optional[CorporateProgram]:
        for program in self.corporate_programs:
            if program.covers(local_date):
                return program
        return None

    def allows_practitioner(self, practitioner_id) -> bool:
        return clean_str(practitioner_id) in self.practitioner_ids


# ============================================================================
# Time-of-day parsing
# ============================================================================

def parse_hhmm(value) -> Optional[int]:
    """
    Parse 'HH:MM' into minutes since midnight.

    '24:00' is accepted and maps to 1440 so intervals can end at midnight.
    Returns None for anything else that is not a valid time.
    """
    match = _HHMM_RE.match(clean_str(value))
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours == 24 and minutes == 0:
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


# ============================================================================
# Weekly hours
# ============================================================================

def _merge(intervals: Iterable[TimeInterval]) -> Tuple[TimeInterval, ...]:
    merged: List[TimeInterval] = []
    for interval in sorted(intervals, key=lambda i: i.start):
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = TimeInterval(last.start, max(last.end, interval.end))
        else:
            merged.append(interval)
    return tuple(merged)


def _clean_intervals(raw) -> Tuple[TimeInterval, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    intervals = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        start = parse_hhmm(item.get('start'))
        end = parse_hhmm(item.get('end'))
        if start is None or end is None or end <= start:
            continue
        intervals.append(TimeInterval(start, end))
    return _merge(intervals)


def _empty_week() -> Dict[str, Tuple[TimeInterval, ...]]:
    return {key: () for key in WEEKDAY_KEYS}


def _from_legacy_opening_hours(opening_hours) -> Dict[str, Tuple[TimeInterval, ...]]:
    week = _empty_week()
    if not isinstance(opening_hours, Mapping):
        return week

    # Shape 1: {"mon": [...], ...}
    if any(isinstance(opening_hours.get(key), list) for key in WEEKDAY_KEYS):
        for key in WEEKDAY_KEYS:
            week[key] = _clean_intervals(opening_hours.get(key))
        return week

    # Shape 2: {"days": [{"day": "Monday", "closed": false, "intervals": [...]}]}
    for row in opening_hours.get('days') or []:
        if not isinstance(row, Mapping):
            continue
        raw_day = (
            clean_str(row.get('day')) or clean_str(row.get('day_key'))
            or clean_str(row.get('dayKey')) or clean_str(row.get('weekday'))
        )
        key = raw_day.lower()[:3]
        if key not in week:
            continue
        closed = (
            row.get('closed') is True or row.get('is_closed') is True
            or row.get('open') is False or row.get('is_open') is False
        )
        if closed:
            week[key] = ()
            continue
        intervals = row.get('intervals') or row.get('windows') or row.get('ranges')
        if not intervals and row.get('start') and row.get('end'):
            intervals = [{'start': row.get('start'), 'end': row.get('end')}]
        week[key] = _clean_intervals(intervals)
    return week


def normalize_weekly_hours(weekly_hours, opening_hours=None) -> Dict[str, Tuple[TimeInterval, ...]]:
    """
    Canonical weekly hours keyed mon..sun.

    ``weekly_hours`` wins when it is a non-empty mapping; otherwise the
    legacy ``opening_hours`` shapes are read. Invalid and empty intervals
    are dropped, the rest sorted and merged.
    """
    if isinstance(weekly_hours, Mapping) and weekly_hours:
        week = _empty_week()
        for key in WEEKDAY_KEYS:
            week[key] = _clean_intervals(weekly_hours.get(key))
        return week
    return _from_legacy_opening_hours(opening_hours)


def intersect_weekly_hours(a: WeeklyHours, b: WeeklyHours) -> Dict[str, Tuple[TimeInterval, ...]]:
    """Per-weekday intersection of two weekly schedules."""
    week = _empty_week()
    for key in WEEKDAY_KEYS:
        left, right = list(a.get(key, ())), list(b.get(key, ()))
        out = []
        i = j = 0
        while i < len(left) and j < len(right):
            start = max(left[i].start, right[j].start)
            end = min(left[i].end, right[j].end)
            if end > start:
                out.append(TimeInterval(start, end))
            if left[i].end < right[j].end:
                i += 1
            else:
                j += 1
        week[key] = _merge(out)
    return week


def weekly_hours_to_dict(weekly: WeeklyHours) -> Dict[str, List[Dict[str, str]]]:
    return {key: [i.to_dict() for i in weekly.get(key, ())] for key in WEEKDAY_KEYS}


# ============================================================================
# Corporate programs and practitioner allowlist
# ============================================================================

def normalize_corporate_programs(raw) -> Tuple[CorporateProgram, ...]:
    programs = []
    for item in raw if isinstance(raw, (list, tuple)) else []:
        if not isinstance(item, Mapping):
            continue
        slug = clean_str(item.get('corp_slug') or item.get('corpSlug') or item.get('slug'))
        if not slug:
            continue
        mode = MODE_CODE_UNLOCK if clean_str(item.get('mode')).upper() == MODE_CODE_UNLOCK else MODE_LINK_ONLY
        days = frozenset(clean_str(d).lower() for d in item.get('days') or [] if clean_str(d))
        programs.append(CorporateProgram(
            slug=slug,
            display_name=clean_str(item.get('display_name') or item.get('displayName')),
            mode=mode,
            days=days,
        ))
    return tuple(programs)


def normalize_practitioner_allowlist(raw) -> Tuple[Tuple[str, ...], Dict[str, str]]:
    """
    Allowlisted practitioner ids (first-seen order) and their display names.

    Accepts {"id": ..., "display_name": ...} objects, bare id strings and
    legacy 'id: "..." displayName: "..."' strings.
    """
    ids: List[str] = []
    names: Dict[str, str] = {}
    for item in raw if isinstance(raw, (list, tuple)) else []:
        if isinstance(item, Mapping):
            pid = clean_str(item.get('id'))
            name = clean_str(item.get('display_name') or item.get('displayName'))
        elif isinstance(item, str):
            id_match = _LEGACY_ID_RE.search(item)
            if id_match:
                pid = clean_str(id_match.group(1))
                name_match = _LEGACY_NAME_RE.search(item)
                name = clean_str(name_match.group(1)) if name_match else ''
            else:
                pid, name = clean_str(item), ''
        else:
            continue
        if not pid or pid in names:
            continue
        ids.append(pid)
        names[pid] = name
    return tuple(ids), names


def _int_or_default(value, default: int) -> int:
    return value if isinstance(value, int) and value >= 0 else default


def build_schedule_config(booking_settings) -> ScheduleConfig:
    """Build the immutable configuration from a PublicBookingSettings row."""
    practitioner_ids, practitioner_names = normalize_practitioner_allowlist(booking_settings.practitioners)
    step = _int_or_default(booking_settings.slot_step_minutes, DEFAULT_SLOT_STEP_MINUTES)
    return ScheduleConfig(
        timezone=clean_str(booking_settings.timezone) or settings.SCHEDULING_DEFAULT_TIMEZONE,
        slot_step_minutes=step or DEFAULT_SLOT_STEP_MINUTES,
        min_notice_minutes=_int_or_default(booking_settings.min_notice_minutes, DEFAULT_MIN_NOTICE_MINUTES),
        max_advance_days=_int_or_default(booking_settings.max_advance_days, DEFAULT_MAX_ADVANCE_DAYS),
        weekly_hours=normalize_weekly_hours(booking_settings.weekly_hours, booking_settings.opening_hours),
        corporate_programs=normalize_corporate_programs(booking_settings.corporate_programs),
        practitioner_ids=practitioner_ids,
        practitioner_names=practitioner_names,
    )
