from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_date: date
    payment_type: Optional[str] = None
    percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    description: Optional[str] = None


class PaymentUpdate(PaymentCreate):
    """A full replacement of the payment's editable fields; the target never changes."""
