"""
Project Model Module

This module defines the Project model. A project is either tied to a contract
(and through it to a client) or independent, billed directly by hours at its
own rate.
"""
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional
from sqlmodel import SQLModel, Field

from app.models.fields import Amount, ZERO


class ProjectStatus(str, Enum):
    active = "active"
    on_hold = "on_hold"
    completed = "completed"
    cancelled = "cancelled"


class Project(SQLModel):
    """
    Project model.

    Invariants:
    - An independent project never references a contract and always carries a
      positive hourly_rate.
    - For independent projects total_amount = hourly_rate x estimated_hours.

    Attributes:
        id: Sequential identifier
        name: Project name (required)
        description: Project description (required)
        contract_id: Contract the project belongs to (None for independent projects)
        client_id: Client the project belongs to (None for independent projects)
        is_independent: Billed directly rather than through a contract
        client_name: Free-text client for independent projects, resolved name otherwise
        hourly_rate: Own rate of an independent project
        estimated_hours: Planned hours
        total_amount: Planned value of an independent project
        paid_amount: Cumulative amount received (payments plus independent-project
            time entries)
        last_payment_date: ISO date of the latest payment applied
        status: One of "active", "on_hold", "completed", "cancelled"
    """
    __collection__: ClassVar[str] = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    description: Optional[str] = None

    # Relationships
    contract_id: Optional[int] = None
    client_id: Optional[int] = None
    is_independent: bool = False
    client_name: Optional[str] = None

    # Planning and rates
    hourly_rate: Optional[Amount] = None
    estimated_hours: Optional[Amount] = None
    total_amount: Optional[Amount] = None

    # Running totals
    paid_amount: Amount = ZERO
    last_payment_date: Optional[str] = None

    # Timeline - ISO dates (YYYY-MM-DD)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: ProjectStatus = ProjectStatus.active

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def planned_total(self) -> Optional[Decimal]:
        """hourly_rate x estimated_hours for independent projects, else None."""
        if self.is_independent and self.hourly_rate and self.estimated_hours:
            return self.hourly_rate * self.estimated_hours
        return None
