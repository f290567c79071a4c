"""
Client Model Module

This module defines the Client model representing the customers that contracts
and projects are billed to.
"""
from typing import ClassVar, Optional
from sqlmodel import SQLModel, Field


class Client(SQLModel):
    """
    Client model representing a billed customer.

    A client can only be deleted while no contract and no contract-linked
    (non-independent) project refers to it.

    Attributes:
        id: Sequential identifier assigned on creation
        name: Display name of the client (required)
        email: Billing contact email (required)
        phone, address, company, tax_id, contact_person, website, notes: optional details
        is_active: Whether the client is currently active
        created_at: ISO timestamp of when the client record was created
        updated_at: ISO timestamp of the last modification
    """
    __collection__: ClassVar[str] = "clients"

    # Primary key - assigned by the store as max(existing ids) + 1
    id: Optional[int] = Field(default=None, primary_key=True)

    # Required identity
    name: str
    email: str

    # Optional contact details
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    tax_id: Optional[str] = None
    contact_person: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None

    is_active: bool = True

    # Audit timestamps - set from the injected clock
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
