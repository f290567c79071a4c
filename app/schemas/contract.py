from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from app.models.contract import Contract, ContractStatus
from app.models.fields import Amount


class ContractCreate(BaseModel):
    client_id: int
    contract_number: str = Field(min_length=1)
    description: str = Field(min_length=1)
    total_hours: Decimal = Field(gt=0)
    hourly_rate: Decimal = Field(gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ContractStatus = ContractStatus.active


class ContractUpdate(BaseModel):
    """
    Editable contract fields. billed_amount and last_payment_date are not
    here: they only move through payments.
    """
    client_id: Optional[int] = None
    contract_number: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    total_hours: Optional[Decimal] = Field(default=None, gt=0)
    hourly_rate: Optional[Decimal] = Field(default=None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ContractStatus] = None


class ContractListing(Contract):
    """Contract with its derived balances, computed on read."""
    client_name: str
    used_hours: Amount
    remaining_hours: Amount
    total_value: Amount
    remaining_amount: Amount
    entries_count: int


class ContractDeletion(BaseModel):
    """
    Outcome of a contract delete request.

    When the contract still has dependents and the request was not forced,
    ``requires_confirmation`` is True and nothing was deleted.
    """
    deleted: bool
    requires_confirmation: bool = False
    has_time_entries: bool = False
    has_projects: bool = False
    contract: Optional[Contract] = None
    removed_time_entries: int = 0
    detached_projects: int = 0
