from rest_framework.permissions import BasePermission


class IsAdmin(BasePermission):
    """Administrators only."""
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin)


class IsManagerOrAdmin(BasePermission):
    """Inventory managers, IT managers and administrators."""
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return (
            request.user.is_admin
            or request.user.is_inventory_manager
            or request.user.is_it_manager
        )


class ReadManagerWriteAdmin(BasePermission):
    """Safe methods for managers, everything else for administrators."""
    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return IsManagerOrAdmin().has_permission(request, view)
        return IsAdmin().has_permission(request, view)
