"""
Tests for busy-interval loading and the appointment mirror.

Covers:
1. Legacy scope classification
2. Practitioner vs clinic applicability
3. Cancelled blocks and inactive closures are ignored
4. Appointment save/cancel/delete keeps its busy block in step
"""
from datetime import datetime, timedelta

import pytest
import pytz

from apps.clinical.models import Appointment, AppointmentKindChoices, AppointmentStatusChoices
from apps.scheduling.busy import classify_scope, load_busy, load_closures
from apps.scheduling.models import (
    BusyBlock,
    BusyBlockScopeChoices,
    BusyBlockSourceChoices,
    BusyBlockStatusChoices,
    Closure,
)
from apps.scheduling.services import upsert_appointment_block

UTC = pytz.utc
START = UTC.localize(datetime(2026, 3, 2, 8, 0))
END = START + timedelta(hours=8)


def block(clinic, hour, **kwargs):
    kwargs.setdefault('kind', 'appointment')
    return BusyBlock.objects.create(
        clinic=clinic,
        start_at=START + timedelta(hours=hour),
        end_at=START + timedelta(hours=hour, minutes=30),
        **kwargs
    )


class TestClassifyScope:

    @pytest.mark.parametrize('scope,kind,clinician_id,expected', [
        ('clinic', 'appointment', 'p1', 'clinic'),
        ('practitioner', 'admin', '', 'practitioner'),
        ('', 'admin', '', 'clinic'),
        ('', 'ADMIN', '', 'clinic'),
        ('', 'admin', 'p1', 'practitioner'),
        ('', 'appointment', '', 'practitioner'),
    ])
    def test_legacy_rules(self, scope, kind, clinician_id, expected):
        row = BusyBlock(scope=scope, kind=kind, clinician_id=clinician_id)

        assert classify_scope(row) == expected


@pytest.mark.django_db
class TestLoadBusy:

    def test_clinic_blocks_apply_to_everyone(self, clinic, practitioner):
        block(clinic, 0, scope=BusyBlockScopeChoices.CLINIC)

        assert len(load_busy(clinic.id, None, START, END)) == 1
        assert len(load_busy(clinic.id, str(practitioner.id), START, END)) == 1

    def test_practitioner_blocks_apply_only_to_owner(self, clinic, practitioner):
        block(clinic, 1, scope=BusyBlockScopeChoices.PRACTITIONER, practitioner=practitioner)
        block(clinic, 2, clinician_id='legacy-42')

        assert load_busy(clinic.id, None, START, END) == []
        assert len(load_busy(clinic.id, str(practitioner.id), START, END)) == 1
        assert len(load_busy(clinic.id, 'legacy-42', START, END)) == 1
        assert load_busy(clinic.id, 'someone-else', START, END) == []

    def test_cancelled_and_out_of_range_blocks_ignored(self, clinic):
        block(clinic, 0, scope=BusyBlockScopeChoices.CLINIC, status=BusyBlockStatusChoices.CANCELLED)
        block(clinic, 9, scope=BusyBlockScopeChoices.CLINIC)

        assert load_busy(clinic.id, None, START, END) == []

    def test_other_clinic_blocks_ignored(self, clinic, db):
        from apps.core.models import Clinic

        other = Clinic.objects.create(name='Other', slug='other')
        block(other, 0, scope=BusyBlockScopeChoices.CLINIC)

        assert load_busy(clinic.id, None, START, END) == []

    def test_only_active_closures_loaded(self, clinic):
        Closure.objects.create(clinic=clinic, from_at=START, to_at=START + timedelta(hours=1))
        Closure.objects.create(
            clinic=clinic, from_at=START, to_at=START + timedelta(hours=1), is_active=False,
        )

        closures = load_closures(clinic.id, START, END)

        assert len(closures) == 1
        assert closures[0].start == START


@pytest.mark.django_db
class TestAppointmentMirror:

    def make_appointment(self, clinic, practitioner, **kwargs):
        return Appointment.objects.create(
            clinic=clinic,
            practitioner=practitioner,
            kind=AppointmentKindChoices.ADMIN,
            start=START,
            end=START + timedelta(hours=1),
            **kwargs
        )

    def test_saving_appointment_creates_practitioner_block(self, clinic, practitioner):
        appointment = self.make_appointment(clinic, practitioner)

        mirror = BusyBlock.objects.get(appointment=appointment)
        assert mirror.scope == BusyBlockScopeChoices.PRACTITIONER
        assert mirror.practitioner_id == practitioner.id
        assert mirror.status == BusyBlockStatusChoices.BOOKED
        assert mirror.source == BusyBlockSourceChoices.RESERVATION

    def test_practitioner_less_admin_block_is_clinic_wide(self, clinic):
        appointment = self.make_appointment(clinic, None)

        assert BusyBlock.objects.get(appointment=appointment).scope == BusyBlockScopeChoices.CLINIC

    def test_reschedule_and_cancel_update_block(self, clinic, practitioner):
        appointment = self.make_appointment(clinic, practitioner)

        appointment.start = START + timedelta(hours=2)
        appointment.end = START + timedelta(hours=3)
        appointment.save()
        mirror = BusyBlock.objects.get(appointment=appointment)
        assert mirror.start_at == START + timedelta(hours=2)

        appointment.status = AppointmentStatusChoices.CANCELLED
        appointment.save()
        mirror.refresh_from_db()
        assert mirror.status == BusyBlockStatusChoices.CANCELLED
        assert BusyBlock.objects.filter(appointment=appointment).count() == 1

    def test_deleting_appointment_removes_block(self, clinic, practitioner):
        appointment = self.make_appointment(clinic, practitioner)

        appointment.delete()

        assert not BusyBlock.objects.exists()

    def test_explicit_source_survives_later_saves(self, clinic, practitioner):
        appointment = self.make_appointment(clinic, practitioner)
        upsert_appointment_block(appointment, source=BusyBlockSourceChoices.PUBLIC)

        appointment.save()

        assert BusyBlock.objects.get(appointment=appointment).source == BusyBlockSourceChoices.PUBLIC
