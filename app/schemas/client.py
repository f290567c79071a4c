from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from app.models.client import Client
from app.models.fields import Amount


# Shared properties
class ClientBase(BaseModel):
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    tax_id: Optional[str] = None
    contact_person: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None


# Properties to receive via API on creation
class ClientCreate(ClientBase):
    name: str = Field(min_length=1)
    email: EmailStr


# Properties to receive via API on update (merged over the stored client)
class ClientUpdate(ClientBase):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None


class ClientWithStats(Client):
    """Client as listed, with contract and project counts and planned values."""
    contracts_count: int = 0
    projects_count: int = 0
    total_contract_value: Amount = Decimal("0")
    total_project_value: Amount = Decimal("0")
    total_value: Amount = Decimal("0")


class ClientSummary(ClientWithStats):
    """One client's aggregate position across its contracts and projects."""
    total_contract_billed: Amount = Decimal("0")
    total_project_billed: Amount = Decimal("0")
    total_billed: Amount = Decimal("0")
