"""
Flag checks for direct appointment scheduling.

Which flags are needed depends on the request body, so the view calls
require_appointment_flags after validation instead of declaring a DRF
permission class.
"""
from apps.authz.models import PermissionFlag
from apps.clinical.models import AppointmentKindChoices
from apps.core.errors import PermissionDenied


def require_appointment_flags(membership, kind, allow_closed_override):
    """
    - Closure override needs settings.write.
    - Otherwise schedule.read plus schedule.write or schedule.manage.
    - Patient kinds also need patients.read.
    """
    if allow_closed_override:
        if not membership.has_flag(PermissionFlag.SETTINGS_WRITE):
            raise PermissionDenied('Closure override requires settings.write.')
    else:
        can_write = (
            membership.has_flag(PermissionFlag.SCHEDULE_WRITE)
            or membership.has_flag(PermissionFlag.SCHEDULE_MANAGE)
        )
        if not membership.has_flag(PermissionFlag.SCHEDULE_READ) or not can_write:
            raise PermissionDenied('Scheduling permission required.')

    if kind != AppointmentKindChoices.ADMIN and not membership.has_flag(PermissionFlag.PATIENTS_READ):
        raise PermissionDenied('Patient bookings require patients.read.')
