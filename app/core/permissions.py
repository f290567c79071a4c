"""
Role and Permission Module

Maps each user role to the operations it may perform. Endpoints declare the
permission they need through ``deps.PermissionChecker``.
"""
from enum import Enum
from typing import Dict, FrozenSet

from app.models.user import UserRole


class Permission(str, Enum):
    VIEW_DASHBOARD = "view_dashboard"

    VIEW_CLIENTS = "view_clients"
    CREATE_CLIENTS = "create_clients"
    EDIT_CLIENTS = "edit_clients"
    DELETE_CLIENTS = "delete_clients"

    VIEW_CONTRACTS = "view_contracts"
    CREATE_CONTRACTS = "create_contracts"
    EDIT_CONTRACTS = "edit_contracts"
    DELETE_CONTRACTS = "delete_contracts"

    VIEW_PROJECTS = "view_projects"
    CREATE_PROJECTS = "create_projects"
    EDIT_PROJECTS = "edit_projects"
    DELETE_PROJECTS = "delete_projects"

    VIEW_TIME_ENTRIES = "view_time_entries"
    CREATE_TIME_ENTRIES = "create_time_entries"
    EDIT_TIME_ENTRIES = "edit_time_entries"
    DELETE_TIME_ENTRIES = "delete_time_entries"

    VIEW_PAYMENTS = "view_payments"
    CREATE_PAYMENTS = "create_payments"
    EDIT_PAYMENTS = "edit_payments"
    DELETE_PAYMENTS = "delete_payments"

    VIEW_REPORTS = "view_reports"
    VIEW_TIME_REPORTS = "view_time_reports"

    MANAGE_CATEGORIES = "manage_categories"
    MANAGE_USERS = "manage_users"


ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.ADMIN: frozenset(Permission),
    UserRole.COLLABORATOR: frozenset({
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_CLIENTS,
        Permission.VIEW_CONTRACTS,
        Permission.VIEW_PROJECTS,
        Permission.CREATE_PROJECTS,
        Permission.EDIT_PROJECTS,
        Permission.VIEW_TIME_ENTRIES,
        Permission.CREATE_TIME_ENTRIES,
        Permission.EDIT_TIME_ENTRIES,
        Permission.DELETE_TIME_ENTRIES,
        Permission.VIEW_PAYMENTS,
        Permission.VIEW_REPORTS,
        Permission.VIEW_TIME_REPORTS,
    }),
    UserRole.CLIENT: frozenset({
        Permission.VIEW_TIME_REPORTS,
    }),
}


def has_permission(role: str, permission: Permission) -> bool:
    """True if ``role`` (a UserRole or its string value) grants ``permission``."""
    try:
        user_role = UserRole(role)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS.get(user_role, frozenset())
