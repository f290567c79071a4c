"""
Contract Endpoints Module

Contract CRUD plus the payment and resync routes nested under a contract.
Every hour and money movement is delegated to the Ledger; listings come from
Reports and carry derived balances computed on read.
"""
from typing import Any, Optional
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import fail, ok
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.contract import ContractCreate, ContractUpdate
from app.schemas.payment import PaymentCreate
from app.services.ledger import Ledger
from app.services.reports import Reports

router = APIRouter()


@router.get("")
def list_contracts(
    client_id: Optional[int] = None,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_CONTRACTS)),
) -> Any:
    """
    Retrieve contracts with client name, used/remaining hours and balances.

    Args:
        client_id: Only contracts of this client
    """
    return ok(contracts=reports.contracts(client_id=client_id))


@router.get("/{contract_id}")
def read_contract(
    contract_id: int,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_CONTRACTS)),
) -> Any:
    return ok(contract=reports.contract(contract_id))


@router.post("", status_code=201)
def create_contract(
    contract_in: ContractCreate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.CREATE_CONTRACTS)),
) -> Any:
    """
    Create a contract.

    Raises:
        NotFound: If the client doesn't exist
        Conflict: If the contract number is already used
    """
    return ok(contract=ledger.create_contract(contract_in), message="Contract created")


@router.put("/{contract_id}")
def update_contract(
    contract_id: int,
    contract_in: ContractUpdate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.EDIT_CONTRACTS)),
) -> Any:
    """
    Update a contract's terms.

    billed_amount is not editable here; it only moves through payments.

    Raises:
        InsufficientHours: If total_hours would drop below the hours already used
    """
    return ok(contract=ledger.update_contract(contract_id, contract_in), message="Contract updated")


@router.delete("/{contract_id}")
def delete_contract(
    contract_id: int,
    force: bool = False,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.DELETE_CONTRACTS)),
) -> Any:
    """
    Delete a contract.

    Without ``force``, a contract that still has time entries or projects is
    not deleted: the response has ``success: false`` and
    ``requiresConfirmation: true`` with the kinds of dependents found. With
    ``force=true`` its time entries are removed and its projects detached.
    """
    result = ledger.delete_contract(contract_id, force=force)
    if result.requires_confirmation:
        return fail(
            "Contract has related records. Confirm to delete it anyway.",
            requiresConfirmation=True,
            relatedData={"timeEntries": result.has_time_entries, "projects": result.has_projects},
        )
    return ok(
        message="Contract deleted",
        contract=result.contract,
        removed_time_entries=result.removed_time_entries,
        detached_projects=result.detached_projects,
    )


@router.post("/{contract_id}/payment", status_code=201)
def record_contract_payment(
    contract_id: int,
    payment_in: PaymentCreate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.CREATE_PAYMENTS)),
) -> Any:
    """
    Register a payment against a contract; its billed_amount grows by the amount.
    """
    payment, contract = ledger.record_payment(payment_in, contract_id=contract_id)
    return ok(payment=payment, contract=contract, message="Payment recorded")


@router.get("/{contract_id}/payments")
def list_contract_payments(
    contract_id: int,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_PAYMENTS)),
) -> Any:
    reports.contract(contract_id)
    return ok(payments=reports.payments(contract_id=contract_id))


@router.post("/{contract_id}/resync")
def resync_contract(
    contract_id: int,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.EDIT_PAYMENTS)),
) -> Any:
    """
    Rebuild billed_amount and last_payment_date from the payment history.
    """
    return ok(contract=ledger.resync_contract(contract_id), message="Contract balances recomputed")
