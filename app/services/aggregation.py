"""
Balance arithmetic shared by the ledger's mutation path and the read views.

Mutations move running totals with ``apply_delta``; resyncs and reports
rebuild the same totals by folding ``apply_delta`` over the leaf records.
Both paths therefore agree by construction.
"""
from decimal import Decimal
from functools import reduce
from typing import Iterable, Optional

from app.models.contract import Contract
from app.models.fields import ZERO
from app.models.payment import Payment
from app.models.project import Project
from app.models.time_entry import TimeEntry

HUNDRED = Decimal("100")


def apply_delta(balance: Decimal, delta: Decimal) -> Decimal:
    """Move a running total by a signed delta, never below zero."""
    return max(ZERO, balance + delta)


def fold_contributions(contributions: Iterable[Decimal]) -> Decimal:
    """The value a running total has after applying every contribution in order."""
    return reduce(apply_delta, contributions, ZERO)


def sum_hours(entries: Iterable[TimeEntry]) -> Decimal:
    return sum((entry.hours_used for entry in entries), ZERO)


def contract_entries(entries: Iterable[TimeEntry], contract_id: int) -> list:
    return [entry for entry in entries if entry.contract_id == contract_id]


def project_entries(entries: Iterable[TimeEntry], project_id: int) -> list:
    return [entry for entry in entries if entry.project_id == project_id]


def billed_project_entries(entries: Iterable[TimeEntry], project_id: int) -> list:
    return [entry for entry in project_entries(entries, project_id) if entry.billed_to_project]


def remaining(total: Optional[Decimal], used: Decimal) -> Decimal:
    return max(ZERO, (total or ZERO) - used)


def contract_value(contract: Contract) -> Decimal:
    return contract.total_hours * contract.hourly_rate


def contract_remaining_amount(contract: Contract) -> Decimal:
    return max(ZERO, contract_value(contract) - contract.billed_amount)


def progress_percentage(used: Decimal, total: Decimal) -> Decimal:
    if total <= 0:
        return ZERO
    return min(HUNDRED, used / total * HUNDRED)


def applicable_rate(project: Optional[Project], contract: Optional[Contract]) -> Decimal:
    """
    Rate a project's hours are worth: its own rate when independent, the
    rate of its contract otherwise.
    """
    if project is not None and project.is_independent:
        return project.hourly_rate or ZERO
    if contract is not None:
        return contract.hourly_rate
    return ZERO


def project_value(project: Project) -> Decimal:
    """Planned value: total_amount, falling back to rate x estimated hours."""
    if project.total_amount is not None:
        return project.total_amount
    return (project.hourly_rate or ZERO) * (project.estimated_hours or ZERO)


def payment_contributions(payments: Iterable[Payment], *, contract_id: Optional[int] = None,
                          project_id: Optional[int] = None) -> list:
    if contract_id is not None:
        return [p.amount for p in payments if p.contract_id == contract_id]
    return [p.amount for p in payments if p.project_id == project_id]


def latest_payment_date(payments: Iterable[Payment]) -> Optional[str]:
    # ISO dates compare correctly as strings
    return max((p.payment_date for p in payments), default=None)


def recompute_contract_billed(contract: Contract, payments: Iterable[Payment]) -> Decimal:
    return fold_contributions(payment_contributions(payments, contract_id=contract.id))


def recompute_project_paid(project: Project, payments: Iterable[Payment],
                           entries: Iterable[TimeEntry]) -> Decimal:
    """
    Payments received plus the amount of every time entry billed to the
    project when it was recorded or last edited (``billed_to_project``).
    """
    contributions = payment_contributions(payments, project_id=project.id)
    contributions += [entry.amount for entry in billed_project_entries(entries, project.id)]
    return fold_contributions(contributions)
