from rest_framework import permissions

from utils.rbac import is_admin, is_seller


class IsSellerUser(permissions.BasePermission):
    """
    Permission to check if user has seller role
    Allows sellers and admins to access seller-only endpoints
    """

    message = "Seller account required."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False

        return is_seller(request.user)


class IsAdminUser(permissions.BasePermission):
    """
    Permission to check if user has admin role
    Only allows admins to access admin-only endpoints
    """

    message = "Admin account required."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False

        return is_admin(request.user)
