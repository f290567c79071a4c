"""
Category Endpoints Module

Hour categories for time entries. Anyone signed in can read them; changing
them requires the manage-categories permission (administrators).
"""
from typing import Any
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import ok
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.categories import CategoryService

router = APIRouter()


@router.get("")
def list_categories(
    include_inactive: bool = False,
    categories: CategoryService = Depends(deps.get_category_service),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Retrieve categories sorted by name. Inactive ones only on request.
    """
    return ok(categories=categories.list(include_inactive=include_inactive))


@router.get("/{category_id}")
def read_category(
    category_id: int,
    categories: CategoryService = Depends(deps.get_category_service),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    return ok(category=categories.get(category_id))


@router.post("", status_code=201)
def create_category(
    category_in: CategoryCreate,
    categories: CategoryService = Depends(deps.get_category_service),
    current_user: User = Depends(deps.PermissionChecker(Permission.MANAGE_CATEGORIES)),
) -> Any:
    """
    Create a category.

    Raises:
        Conflict: If another category has the same name (ignoring case)
    """
    return ok(category=categories.create(category_in), message="Category created")


@router.put("/{category_id}")
def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    categories: CategoryService = Depends(deps.get_category_service),
    current_user: User = Depends(deps.PermissionChecker(Permission.MANAGE_CATEGORIES)),
) -> Any:
    """
    Update a category, or flip its active flag with ``toggle_active``.
    """
    return ok(category=categories.update(category_id, category_in), message="Category updated")


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    categories: CategoryService = Depends(deps.get_category_service),
    current_user: User = Depends(deps.PermissionChecker(Permission.MANAGE_CATEGORIES)),
) -> Any:
    """
    Delete a category.

    Raises:
        ValidationError: For the General category (id 1)
        HasDependents: If any time entry uses the category
    """
    categories.delete(category_id)
    return ok(message="Category deleted")
