from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from app.models.time_entry import GENERAL_CATEGORY_ID, TimeEntry


class TimeEntryCreate(BaseModel):
    """
    Body for recording hours. At most one of contract_id / project_id may be
    given; with neither the entry is untracked.
    """
    contract_id: Optional[int] = None
    project_id: Optional[int] = None
    description: str = Field(min_length=1)
    hours_used: Decimal = Field(gt=0)
    entry_date: date
    category_id: int = GENERAL_CATEGORY_ID
    created_by: Optional[str] = None
    notes: Optional[str] = None


class TimeEntryUpdate(TimeEntryCreate):
    """A full replacement of the entry's editable fields."""


class TimeEntryListing(TimeEntry):
    contract_number: Optional[str] = None
    project_name: Optional[str] = None
    category_name: str = "General"
    client_name: str
