"""
Time Entry Model Module

A time entry records hours worked against a contract or a project on a given
date.
"""
from typing import ClassVar, Optional
from sqlmodel import SQLModel, Field

from app.models.fields import Amount, ZERO

GENERAL_CATEGORY_ID = 1


class TimeEntry(SQLModel):
    """
    Time entry model.

    At most one of contract_id / project_id is set; an entry with neither is
    untracked and touches no balance.

    Attributes:
        id: Sequential identifier
        contract_id: Contract the hours count against
        project_id: Project the hours were spent on
        description: Work performed (required)
        hours_used: Hours worked, always > 0
        amount: hours_used x the applicable hourly rate at the time of recording
        billed_to_project: The amount was added to an independent project's
            paid_amount when recorded; only such entries are reversed later
        entry_date: ISO date of the work (YYYY-MM-DD)
        month_year: "YYYY-MM" prefix of entry_date
        category_id: Hour category, 1 ("General") by default
        created_by: Free-text author
        notes: Optional notes
    """
    __collection__: ClassVar[str] = "time_entries"

    id: Optional[int] = Field(default=None, primary_key=True)

    contract_id: Optional[int] = None
    project_id: Optional[int] = None

    description: str
    hours_used: Amount
    amount: Amount = ZERO
    billed_to_project: bool = False
    entry_date: str
    month_year: str

    category_id: int = GENERAL_CATEGORY_ID
    created_by: Optional[str] = None
    notes: Optional[str] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None
