from rest_framework import permissions


class IsStaffOrPublicAction(permissions.BasePermission):
    """
    Permission for the booking and table viewsets:
    - Actions listed in the view's `public_actions` are open to anyone
    - Everything else requires a staff user
    """

    def has_permission(self, request, view):
        if view.action in getattr(view, 'public_actions', ()):
            return True

        return bool(request.user and request.user.is_authenticated and request.user.is_staff)
