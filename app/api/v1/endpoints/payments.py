"""
Payment Endpoints Module

Listing, amending and deleting payments. Payments are created through
``/contracts/{id}/payment`` or ``/projects/{id}/payment``.
"""
from typing import Any, Optional
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import ok
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.payment import PaymentUpdate
from app.services.ledger import Ledger
from app.services.reports import Reports

router = APIRouter()


@router.get("")
def list_payments(
    contract_id: Optional[int] = None,
    project_id: Optional[int] = None,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_PAYMENTS)),
) -> Any:
    """
    Retrieve payments, newest first, optionally for one contract or project.
    """
    return ok(payments=reports.payments(contract_id=contract_id, project_id=project_id))


@router.get("/{payment_id}")
def read_payment(
    payment_id: int,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_PAYMENTS)),
) -> Any:
    return ok(payment=reports.payment(payment_id))


@router.put("/{payment_id}")
def update_payment(
    payment_id: int,
    payment_in: PaymentUpdate,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.EDIT_PAYMENTS)),
) -> Any:
    """
    Amend a payment.

    The target's balance moves by the difference between the new and the old
    amount; last_payment_date only moves forward.
    """
    return ok(payment=ledger.update_payment(payment_id, payment_in), message="Payment updated")


@router.delete("/{payment_id}")
def delete_payment(
    payment_id: int,
    ledger: Ledger = Depends(deps.get_ledger),
    current_user: User = Depends(deps.PermissionChecker(Permission.DELETE_PAYMENTS)),
) -> Any:
    """
    Delete a payment, reversing its amount from the target's balance.
    """
    ledger.delete_payment(payment_id)
    return ok(message="Payment deleted")
