"""Role checks shared by the API views"""
from rest_framework.permissions import BasePermission

ROLE_ADMIN = 'admin'
ROLE_EMPLOYEE = 'employee'
ROLE_CUSTOMER = 'customer'


def is_admin_user(user):
    """
    Check if user is an admin user.
    Returns True if:
    - User has the 'admin' role, OR
    - User is a Django superuser
    """
    if not user or not user.is_authenticated:
        return False
    return user.role == ROLE_ADMIN or user.is_superuser


def is_staff_user(user):
    """Admins and employees operate the back office"""
    if not user or not user.is_authenticated:
        return False
    return is_admin_user(user) or user.role == ROLE_EMPLOYEE


class IsAdminRole(BasePermission):
    message = 'Solo los administradores pueden realizar esta acción.'

    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsStaffRole(BasePermission):
    message = 'Solo administradores o empleados pueden realizar esta acción.'

    def has_permission(self, request, view):
        return is_staff_user(request.user)
