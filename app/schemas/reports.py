"""
Report Schemas

Read-only shapes produced by ``app.services.reports``. Every figure is
recomputed from leaf records (time entries, payments) on each request.
"""
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel

from app.models.fields import Amount
from app.schemas.time_entry import TimeEntryListing


class Overview(BaseModel):
    total_contracts: int
    active_contracts: int
    total_projects: int
    active_projects: int
    total_used_hours: Amount
    total_billed_amount: Amount


class MonthlyContractLine(BaseModel):
    contract_id: int
    contract_number: str
    hours: Amount = Decimal("0")
    amount: Amount = Decimal("0")


class MonthlyClientLine(BaseModel):
    client_id: int
    client_name: str
    company: Optional[str] = None
    total_hours: Amount = Decimal("0")
    total_amount: Amount = Decimal("0")
    contracts: List[MonthlyContractLine] = []


class ActiveContractLine(BaseModel):
    id: int
    contract_number: str
    client_name: str
    client_company: Optional[str] = None
    description: Optional[str] = None
    total_hours: Amount
    used_hours: Amount
    remaining_hours: Amount
    hourly_rate: Amount
    total_amount: Amount
    billed_amount: Amount
    remaining_amount: Amount
    progress_percentage: Amount
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    last_activity: Optional[str] = None


class TimeEntryReportLine(TimeEntryListing):
    client_company: Optional[str] = None
    hourly_rate: Amount = Decimal("0")


class TimeEntryReportSummary(BaseModel):
    total_entries: int
    total_hours: Amount
    total_amount: Amount
    start_date: Optional[str] = None
    end_date: Optional[str] = None
