"""
User Management Endpoints Module

This module provides CRUD endpoints for user accounts. Listing, creating and
deleting users requires administrative privileges; users may read and update
their own profile but only administrators may change a role or deactivate an
account.
"""
from typing import Any
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import ok
from app.core.exceptions import Forbidden
from app.models.user import User
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services.users import UserService

router = APIRouter()


@router.get("")
def read_users(
    users: UserService = Depends(deps.get_user_service),
    current_user: User = Depends(deps.get_current_active_superuser),
) -> Any:
    """
    Retrieve all users.

    Only administrators can access this endpoint. Password hashes are never
    included.
    """
    return ok(users=[UserRead.model_validate(u) for u in users.list()])


@router.post("", status_code=201)
def create_user(
    *,
    user_in: UserCreate,
    users: UserService = Depends(deps.get_user_service),
    current_user: User = Depends(deps.get_current_active_superuser),
) -> Any:
    """
    Create a new user.

    Only administrators can create users. Passwords are hashed with bcrypt.

    Args:
        user_in: username, email, password and full_name; role defaults to collaborator
        users: User service
        current_user: Must be an admin (enforced by dependency)

    Returns:
        dict: success envelope with the new user (password excluded)

    Raises:
        Conflict: If the username or email is already registered
    """
    user = users.create(user_in)
    return ok(user=UserRead.model_validate(user), message="User created")


@router.get("/me")
def read_user_me(current_user: User = Depends(deps.get_current_user)) -> Any:
    """
    Get the current authenticated user's profile.
    """
    return ok(user=UserRead.model_validate(current_user))


@router.get("/{user_id}")
def read_user_by_id(
    user_id: int,
    users: UserService = Depends(deps.get_user_service),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Get a specific user by id.

    Users can read their own profile; anyone else's requires admin.
    """
    if user_id != current_user.id and not current_user.is_privileged:
        raise Forbidden("The user doesn't have enough privileges")
    return ok(user=UserRead.model_validate(users.get(user_id)))


@router.put("/{user_id}")
def update_user(
    *,
    user_id: int,
    user_in: UserUpdate,
    users: UserService = Depends(deps.get_user_service),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Update a user.

    Args:
        user_id: ID of the user to update
        user_in: Fields to change (only provided fields are updated)
        users: User service
        current_user: The user themself, or an admin

    Raises:
        Forbidden: If a non-admin edits someone else or changes role / is_active
        NotFound: If the user doesn't exist
        Conflict: If the new username or email is taken
    """
    if not current_user.is_privileged:
        if user_id != current_user.id:
            raise Forbidden("The user doesn't have enough privileges")
        if user_in.role is not None or user_in.is_active is not None:
            raise Forbidden("Only administrators can change roles or account status")
    user = users.update(user_id, user_in)
    return ok(user=UserRead.model_validate(user), message="User updated")


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    users: UserService = Depends(deps.get_user_service),
    current_user: User = Depends(deps.get_current_active_superuser),
) -> Any:
    """
    Delete a user. Administrators cannot delete their own account.
    """
    users.delete(user_id, actor_id=current_user.id)
    return ok(message="User deleted")
