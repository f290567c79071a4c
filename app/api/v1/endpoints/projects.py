"""
Project Endpoints Module

This module provides CRUD endpoints for projects, plus payment and resync
routes nested under a project. A project is either linked to a contract or
independent, billed by hours at its own rate.
"""
from typing import Any, Optional
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import ok
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.payment import PaymentCreate
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.ledger import Ledger
from app.services.reports import Reports

router = APIRouter()


@router.get("")
def list_projects(
    contract_id: Optional[int] = None,
    client_id: Optional[int] = None,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_PROJECTS)),
) -> Any:
    """
    Retrieve projects with used/remaining hours and current cost.

    Args:
        contract_id: Only projects of this contract
        client_id: Only projects of this client
        reports: Read views
        current_user: Currently authenticated user

    Returns:
        dict: success envelope with the project listings
    """
    return ok(projects=reports.projects(contract_id=contract_id, client_id=client_id))


@router.get("/{project_id}")
def read_project(
    project_id: int,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_PROJECTS)),
) -> Any:
    """
    Get a specific project by ID.

    Raises:
        NotFound: If the project doesn't exist
    """
    return ok(project=reports.project(project_id))


@router.post("", status_code=201)
def create_project(
    project_in: ProjectCreate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.CREATE_PROJECTS)),
) -> Any:
    """
    Create a new project.

    Independent projects need a positive hourly_rate and may not name a
    contract; their total_amount is hourly_rate x estimated_hours.
    Contract-linked projects take their client from the contract when none
    is given.

    Raises:
        ValidationError: If the independence rules are broken
        NotFound: If the referenced contract or client doesn't exist
    """
    return ok(project=ledger.create_project(project_in), message="Project created")


@router.put("/{project_id}")
def update_project(
    project_id: int,
    project_in: ProjectUpdate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.EDIT_PROJECTS)),
) -> Any:
    return ok(project=ledger.update_project(project_id, project_in), message="Project updated")


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.DELETE_PROJECTS)),
) -> Any:
    """
    Delete a project.

    Raises:
        HasDependents: If any time entry references the project
    """
    ledger.delete_project(project_id)
    return ok(message="Project deleted")


@router.post("/{project_id}/payment", status_code=201)
def record_project_payment(
    project_id: int,
    payment_in: PaymentCreate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.CREATE_PAYMENTS)),
) -> Any:
    """
    Register a payment against a project; its paid_amount grows by the amount.
    """
    payment, project = ledger.record_payment(payment_in, project_id=project_id)
    return ok(payment=payment, project=project, message="Payment recorded")


@router.get("/{project_id}/payments")
def list_project_payments(
    project_id: int,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_PAYMENTS)),
) -> Any:
    reports.project(project_id)
    return ok(payments=reports.payments(project_id=project_id))


@router.post("/{project_id}/resync")
def resync_project(
    project_id: int,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.EDIT_PAYMENTS)),
) -> Any:
    """
    Rebuild paid_amount and last_payment_date from payments and, for
    independent projects, the amounts of their time entries.
    """
    return ok(project=ledger.resync_project(project_id), message="Project balances recomputed")
