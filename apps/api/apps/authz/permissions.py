"""
Clinic membership permissions.
"""
from rest_framework import permissions

from apps.authz.models import ClinicMembership


def get_membership(user, clinic_id):
    """Return the user's membership in the clinic, or None."""
    if not user or not user.is_authenticated:
        return None
    return ClinicMembership.objects.filter(clinic_id=clinic_id, user=user).first()


class IsActiveClinicMember(permissions.BasePermission):
    """
    Allows access to members of the clinic named by the ``clinic_id`` URL kwarg.

    The membership must be active. Flag checks happen in the view because
    the required flags depend on the request body.
    """
    message = 'Not a member of this clinic.'

    def has_permission(self, request, view):
        clinic_id = view.kwargs.get('clinic_id')
        membership = get_membership(request.user, clinic_id)
        if membership is None or not membership.is_usable:
            return False
        request.clinic_membership = membership
        return True


class IsNotGuest(permissions.BasePermission):
    """Rejects anonymous guest identities."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and not request.user.is_guest)
