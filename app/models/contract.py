"""
Contract Model Module

A contract is a billing agreement with a client for a fixed hour budget at a
fixed hourly rate.
"""
from enum import Enum
from typing import ClassVar, Optional
from sqlmodel import SQLModel, Field

from app.models.fields import Amount, ZERO


class ContractStatus(str, Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class Contract(SQLModel):
    """
    Contract model.

    Only ``billed_amount`` and ``last_payment_date`` are running totals; they
    move exclusively through payments. Used and remaining hours, total value and
    remaining amount are never stored - they are computed on read from time
    entries (see ``app.services.aggregation``).

    Attributes:
        id: Sequential identifier
        client_id: Owning client
        contract_number: Unique human-facing contract code
        description: What the contract covers
        total_hours: Hour budget
        hourly_rate: Rate billed per hour
        start_date, end_date: ISO dates (YYYY-MM-DD)
        status: One of "active", "completed", "cancelled"
        billed_amount: Cumulative amount received through payments
        last_payment_date: ISO date of the latest payment applied
    """
    __collection__: ClassVar[str] = "contracts"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int
    contract_number: str
    description: Optional[str] = None

    total_hours: Amount
    hourly_rate: Amount

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: ContractStatus = ContractStatus.active

    # Running totals - payments only
    billed_amount: Amount = ZERO
    last_payment_date: Optional[str] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None
