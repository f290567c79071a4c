"""
Time Entry Endpoints Module

Recording, amending and deleting hours. Every write goes through the Ledger,
which enforces the contract hour budget and keeps independent-project
balances in step.
"""
from datetime import date
from typing import Any, Optional
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import ok
from app.core.exceptions import ValidationError
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.time_entry import TimeEntryCreate, TimeEntryUpdate
from app.services.ledger import Ledger
from app.services.reports import Reports

router = APIRouter()


@router.get("")
def list_time_entries(
    contract_id: Optional[int] = None,
    project_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_TIME_ENTRIES)),
) -> Any:
    """
    Retrieve time entries, newest first, with contract, project, category
    and client names attached.

    Args:
        contract_id: Only entries on this contract
        project_id: Only entries on this project
        start_date: Inclusive lower bound, together with end_date
        end_date: Inclusive upper bound, together with start_date
    """
    if (start_date is None) != (end_date is None):
        raise ValidationError("start_date and end_date must be given together")
    return ok(time_entries=reports.time_entries(
        contract_id=contract_id, project_id=project_id, start_date=start_date, end_date=end_date,
    ))


@router.get("/{entry_id}")
def read_time_entry(
    entry_id: int,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_TIME_ENTRIES)),
) -> Any:
    return ok(time_entry=reports.time_entry(entry_id))


@router.post("", status_code=201)
def create_time_entry(
    entry_in: TimeEntryCreate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.CREATE_TIME_ENTRIES)),
) -> Any:
    """
    Record hours against a contract, a project, or neither.

    ``created_by`` defaults to the caller's username.

    Raises:
        ValidationError: If both contract_id and project_id are given
        InsufficientHours: If the contract does not have enough hours left
        NotFound: If the contract, project or category doesn't exist
    """
    if entry_in.created_by is None:
        entry_in.created_by = current_user.username
    return ok(time_entry=ledger.record_time_entry(entry_in), message="Time entry recorded")


@router.put("/{entry_id}")
def update_time_entry(
    entry_id: int,
    entry_in: TimeEntryUpdate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.EDIT_TIME_ENTRIES)),
) -> Any:
    """
    Replace a time entry's fields, re-checking the contract hour budget.
    """
    if entry_in.created_by is None:
        entry_in.created_by = current_user.username
    return ok(time_entry=ledger.update_time_entry(entry_id, entry_in), message="Time entry updated")


@router.delete("/{entry_id}")
def delete_time_entry(
    entry_id: int,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.DELETE_TIME_ENTRIES)),
) -> Any:
    ledger.delete_time_entry(entry_id)
    return ok(message="Time entry deleted")
