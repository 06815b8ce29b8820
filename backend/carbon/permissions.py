from django.conf import settings
from rest_framework import permissions


def is_carbon_verifier(user):
    """Capability check for manual activity verification"""
    if not user or not user.is_authenticated:
        return False
    return user.is_superuser or getattr(user, 'role', None) in settings.CARBON_VERIFIER_ROLES


class IsCarbonVerifier(permissions.BasePermission):
    """
    Only allow users whose role is listed in CARBON_VERIFIER_ROLES.
    """
    message = "Only verifiers can approve activities."

    def has_permission(self, request, view):
        return is_carbon_verifier(request.user)
