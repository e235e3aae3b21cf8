"""
Tests for schedule configuration normalization.

Covers:
1. HH:MM parsing including 24:00
2. Weekly hours cleanup (invalid, overlapping, unsorted intervals)
3. Legacy opening hours shapes
4. Staff hours intersection
5. Corporate programs and practitioner allowlist shapes
"""
from datetime import date

import pytest

from apps.scheduling.config import (
    MODE_CODE_UNLOCK,
    MODE_LINK_ONLY,
    TimeInterval,
    build_schedule_config,
    intersect_weekly_hours,
    normalize_corporate_programs,
    normalize_practitioner_allowlist,
    normalize_weekly_hours,
    parse_hhmm,
    weekly_hours_to_dict,
)
from apps.scheduling.models import PublicBookingSettings


class TestParseHHMM:

    @pytest.mark.parametrize('value,expected', [
        ('00:00', 0),
        ('08:30', 510),
        ('23:59', 1439),
        ('24:00', 1440),
    ])
    def test_valid_times(self, value, expected):
        assert parse_hhmm(value) == expected

    @pytest.mark.parametrize('value', ['24:30', '25:00', '8:30', '12:60', '', None, 'noon'])
    def test_invalid_times(self, value):
        assert parse_hhmm(value) is None


class TestWeeklyHours:

    def test_drops_invalid_and_merges_overlaps(self):
        week = normalize_weekly_hours({
            'mon': [
                {'start': '12:00', 'end': '14:00'},
                {'start': '08:00', 'end': '10:00'},
                {'start': '09:30', 'end': '11:00'},
                {'start': '15:00', 'end': '15:00'},
                {'start': 'bad', 'end': '16:00'},
            ],
        })

        assert week['mon'] == (TimeInterval(480, 660), TimeInterval(720, 840))
        assert week['tue'] == ()

    def test_interval_may_end_at_midnight(self):
        week = normalize_weekly_hours({'sat': [{'start': '20:00', 'end': '24:00'}]})

        assert week['sat'] == (TimeInterval(1200, 1440),)
        assert weekly_hours_to_dict(week)['sat'] == [{'start': '20:00', 'end': '24:00'}]

    def test_weekly_hours_win_over_legacy_opening_hours(self):
        week = normalize_weekly_hours(
            {'mon': [{'start': '09:00', 'end': '10:00'}]},
            {'tue': [{'start': '09:00', 'end': '17:00'}]},
        )

        assert week['mon'] == (TimeInterval(540, 600),)
        assert week['tue'] == ()

    def test_legacy_keyed_opening_hours(self):
        week = normalize_weekly_hours({}, {'wed': [{'start': '10:00', 'end': '12:00'}]})

        assert week['wed'] == (TimeInterval(600, 720),)

    def test_legacy_days_list_opening_hours(self):
        week = normalize_weekly_hours(None, {
            'days': [
                {'day': 'Monday', 'intervals': [{'start': '08:00', 'end': '12:00'}]},
                {'dayKey': 'tue', 'start': '13:00', 'end': '17:00'},
                {'weekday': 'Wednesday', 'closed': True, 'intervals': [{'start': '08:00', 'end': '12:00'}]},
                {'day_key': 'thu', 'windows': [{'start': '07:00', 'end': '09:00'}]},
            ],
        })

        assert week['mon'] == (TimeInterval(480, 720),)
        assert week['tue'] == (TimeInterval(780, 1020),)
        assert week['wed'] == ()
        assert week['thu'] == (TimeInterval(420, 540),)

    def test_intersection_with_staff_hours(self):
        clinic = normalize_weekly_hours({
            'mon': [{'start': '08:00', 'end': '13:00'}, {'start': '14:00', 'end': '18:00'}],
            'tue': [{'start': '08:00', 'end': '13:00'}],
        })
        staff = normalize_weekly_hours({
            'mon': [{'start': '10:00', 'end': '15:00'}],
            'wed': [{'start': '08:00', 'end': '13:00'}],
        })

        week = intersect_weekly_hours(clinic, staff)

        assert week['mon'] == (TimeInterval(600, 780), TimeInterval(840, 900))
        assert week['tue'] == ()
        assert week['wed'] == ()


class TestCorporatePrograms:

    def test_accepts_camel_case_and_defaults_mode(self):
        programs = normalize_corporate_programs([
            {'corpSlug': 'acme', 'displayName': 'ACME Staff', 'days': ['tue', '2026-03-05']},
            {'corp_slug': 'globex', 'mode': 'code_unlock', 'days': ['FRI']},
            {'display_name': 'no slug'},
        ])

        assert [p.slug for p in programs] == ['acme', 'globex']
        assert programs[0].mode == MODE_LINK_ONLY
        assert programs[0].display_name == 'ACME Staff'
        assert programs[1].mode == MODE_CODE_UNLOCK
        assert programs[1].days == frozenset({'fri'})

    def test_program_covers_weekday_and_iso_date(self):
        program = normalize_corporate_programs([{'slug': 'acme', 'days': ['tue', '2026-03-05']}])[0]

        assert program.covers(date(2026, 3, 3))   # Tuesday
        assert program.covers(date(2026, 3, 5))   # listed date (Thursday)
        assert not program.covers(date(2026, 3, 4))


class TestPractitionerAllowlist:

    def test_all_entry_shapes(self):
        ids, names = normalize_practitioner_allowlist([
            {'id': 'p1', 'display_name': 'Dr. One'},
            'p2',
            'id: "p3" displayName: "Dr. Three"',
            {'id': 'p1', 'display_name': 'duplicate'},
            42,
            '',
        ])

        assert ids == ('p1', 'p2', 'p3')
        assert names == {'p1': 'Dr. One', 'p2': '', 'p3': 'Dr. Three'}

    def test_not_a_list(self):
        assert normalize_practitioner_allowlist(None) == ((), {})


class TestBuildScheduleConfig:

    def test_defaults_applied(self):
        row = PublicBookingSettings(
            timezone='Europe/Prague',
            weekly_hours={'mon': [{'start': '08:00', 'end': '09:00'}]},
        )

        config = build_schedule_config(row)

        assert config.slot_step_minutes == 15
        assert config.min_notice_minutes == 0
        assert config.max_advance_days == 365
        assert config.has_hours

    def test_zero_step_falls_back_to_default(self):
        row = PublicBookingSettings(timezone='UTC', slot_step_minutes=0)

        config = build_schedule_config(row)

        assert config.slot_step_minutes == 15
        assert not config.has_hours

    def test_find_program_is_case_insensitive(self):
        row = PublicBookingSettings(
            timezone='UTC',
            corporate_programs=[{'corp_slug': 'Acme', 'days': ['tue']}],
        )

        config = build_schedule_config(row)

        assert config.find_program('ACME').slug == 'Acme'
        assert config.find_program('other') is None
