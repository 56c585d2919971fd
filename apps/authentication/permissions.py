from rest_framework.permissions import BasePermission


class IsAdmin(BasePermission):
    message = 'Admin access required'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and
            user.role == 'ADMIN' and
            hasattr(user, 'admin_profile')
        )


class IsAdvertiser(BasePermission):
    message = 'Advertiser access required'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and
            user.role == 'ADVERTISER' and
            hasattr(user, 'advertiser')
        )


class IsPartner(BasePermission):
    message = 'Partner access required'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and
            user.role == 'PARTNER' and
            hasattr(user, 'partner')
        )


class HasAdminPermission(BasePermission):
    """Checks ``view.required_permission`` against the admin profile's grants."""
    message = 'Insufficient admin permissions'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        profile = getattr(request.user, 'admin_profile', None)
        if profile is None:
            return False

        required_permission = getattr(view, 'required_permission', None)
        if not required_permission:
            return True
        return profile.has_permission(required_permission)
