"""
Payment Model Module
"""
from typing import ClassVar, Optional
from sqlmodel import SQLModel, Field

from app.models.fields import Amount


class Payment(SQLModel):
    """
    Money received against exactly one contract or project.

    Attributes:
        id: Sequential identifier
        contract_id / project_id: The payment target (exactly one is set)
        amount: Amount received, always > 0
        description: Optional free text
        payment_date: ISO date the payment was received
        payment_type: Free-form kind, e.g. "partial", "full", "percentage"
        percentage: Share of the target's value this payment represents, if any
    """
    __collection__: ClassVar[str] = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)

    contract_id: Optional[int] = None
    project_id: Optional[int] = None

    amount: Amount
    description: Optional[str] = None
    payment_date: str
    payment_type: Optional[str] = None
    percentage: Optional[Amount] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None
