from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from app.models.fields import Amount
from app.models.project import Project, ProjectStatus


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    contract_id: Optional[int] = None
    client_id: Optional[int] = None
    is_independent: bool = False
    client_name: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus = ProjectStatus.active


class ProjectUpdate(BaseModel):
    """Fields merged over the stored project; paid_amount only moves through the ledger."""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    contract_id: Optional[int] = None
    client_id: Optional[int] = None
    is_independent: Optional[bool] = None
    client_name: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ProjectStatus] = None


class ProjectListing(Project):
    """Project with derived hours and cost, computed on read."""
    used_hours: Amount
    remaining_hours: Amount
    current_cost: Amount
    entries_count: int
    contract_number: Optional[str] = None
