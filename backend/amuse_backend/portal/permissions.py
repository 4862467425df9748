from rest_framework import permissions

from .roles import has_permission


class HasPortalPermission(permissions.BasePermission):
    """
    Grants access when the user's role carries the view's `required_permission`.
    Views without one only require an authenticated user.
    """

    message = "Your role does not have access to this portal section."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        required = getattr(view, "required_permission", None)
        if required is None:
            return True
        return has_permission(request.user, required)
