"""
Public slot computation.

compute_slots is pure: it takes an immutable ScheduleConfig plus the busy
intervals already loaded for the query and walks candidate starts across
the range. Clinic-local dates and times of day always come from converting
the absolute instant into the clinic zone (pytz), never from UTC date math,
so DST transitions behave.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

import pytz

from apps.scheduling.config import (
    MINUTES_PER_DAY,
    WEEKDAY_KEYS,
    CorporateAccess,
    ScheduleConfig,
)


@dataclass(frozen=True)
class Interval:
    """Absolute half-open interval [start, end)."""
    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime

    def to_dict(self) -> Dict[str, str]:
        return {
            'start': self.start.astimezone(pytz.utc).isoformat(),
            'end': self.end.astimezone(pytz.utc).isoformat(),
        }


def overlaps_any(start: datetime, end: datetime, intervals: Sequence[Interval]) -> bool:
    return any(interval.overlaps(start, end) for interval in intervals)


def _minute_of_day(local_dt: datetime) -> int:
    return local_dt.hour * 60 + local_dt.minute


def _local_bounds(start: datetime, end: datetime, tz):
    """
    Local date, start minute and end minute of a slot.

    A slot ending exactly at local midnight ends at 24:00 of its start
    date. Any other slot crossing midnight has no usable end minute.
    """
    local_start = start.astimezone(tz)
    local_end = end.astimezone(tz)
    start_minute = _minute_of_day(local_start)
    if local_end.date() == local_start.date():
        end_minute = _minute_of_day(local_end)
    elif local_end.date() == local_start.date() + timedelta(days=1) and _minute_of_day(local_end) == 0:
        end_minute = MINUTES_PER_DAY
    else:
        end_minute = None
    return local_start.date(), start_minute, end_minute


def _next_local_midnight(local_date: date, tz) -> datetime:
    return tz.localize(datetime.combine(local_date + timedelta(days=1), time.min))


def _skip_to(cursor: datetime, target: datetime, range_start: datetime, step: timedelta) -> datetime:
    """First candidate start on the range_start + k*step grid at or after target."""
    if target <= cursor:
        return cursor + step
    steps = -(-(target - range_start) // step)
    return range_start + steps * step


def is_date_open(config: ScheduleConfig, corporate: Optional[CorporateAccess], local_date: date) -> bool:
    """Corporate gating for one clinic-local date."""
    if corporate is not None:
        return corporate.unlocked and corporate.program.covers(local_date)
    return config.program_for_date(local_date) is None


def compute_slots(
    config: ScheduleConfig,
    closures: Sequence[Interval],
    busy_blocks: Sequence[Interval],
    corporate: Optional[CorporateAccess],
    range_start: datetime,
    range_end: datetime,
    now: datetime,
) -> List[Slot]:
    """
    Bookable slots of ``config.slot_step_minutes`` in [range_start, range_end).

    Candidates start at range_start and advance by the step; a trailing
    partial step is dropped. A candidate is kept when it respects minimum
    notice and maximum advance, passes corporate gating for its local date,
    lies entirely inside one configured interval of its local weekday and
    does not intersect any closure or busy block.
    """
    if not config.has_hours:
        return []

    tz = pytz.timezone(config.timezone)
    step = timedelta(minutes=config.slot_step_minutes)
    earliest = now + timedelta(minutes=config.min_notice_minutes)
    latest = now + timedelta(days=config.max_advance_days)
    blocked = list(closures) + list(busy_blocks)

    slots = []
    cursor = range_start
    while cursor + step <= range_end:
        if cursor > latest:
            break
        slot_end = cursor + step
        if cursor < earliest:
            cursor = slot_end
            continue

        local_date, start_minute, end_minute = _local_bounds(cursor, slot_end, tz)
        intervals = config.weekly_hours.get(WEEKDAY_KEYS[local_date.weekday()], ())

        if not intervals or not is_date_open(config, corporate, local_date):
            # Nothing on this local date can be booked
            cursor = _skip_to(cursor, _next_local_midnight(local_date, tz), range_start, step)
            continue

        within = end_minute is not None and any(
            interval.contains(start_minute, end_minute) for interval in intervals
        )
        if within and not overlaps_any(cursor, slot_end, blocked):
            slots.append(Slot(cursor, slot_end))
        cursor = slot_end

    return slots


def compute_day_flags(
    config: ScheduleConfig,
    corporate: Optional[CorporateAccess],
    range_start: datetime,
    range_end: datetime,
) -> Dict[str, Dict[str, object]]:
    """
    Corporate flags for every clinic-local date touched by the range.

    With a corporate link only that program's days are flagged; otherwise
    any program day is flagged with the owning program's mode.
    """
    tz = pytz.timezone(config.timezone)
    first = range_start.astimezone(tz).date()
    last = (range_end - timedelta(microseconds=1)).astimezone(tz).date()

    flags = {}
    current = first
    while current <= last:
        if corporate is not None:
            program = corporate.program if corporate.program.covers(current) else None
        else:
            program = config.program_for_date(current)

        if program is None:
            flags[current.isoformat()] = {'corporate_only': False, 'mode': None}
        else:
            flags[current.isoformat()] = {
                'corporate_only': True,
                'mode': program.mode,
                'corp_slug': program.slug,
                'display_name': program.display_name,
            }
        current += timedelta(days=1)
    return flags
