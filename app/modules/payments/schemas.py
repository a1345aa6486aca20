from pydantic import BaseModel, ConfigDict, Field, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime
from app.modules.payments.models import PaymentType, PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Payment amount, must be positive")
    payment_date: date = Field(default_factory=date.today)
    type: PaymentType = PaymentType.RECEIPT
    method: PaymentMethod
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    invoice_id: Optional[UUID] = None
    truck_hiring_note_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None

    @model_validator(mode="after")
    def check_single_target(self):
        if (self.invoice_id is None) == (self.truck_hiring_note_id is None):
            raise ValueError("Exactly one of invoice_id or truck_hiring_note_id is required")
        return self


class PaymentUpdate(BaseModel):
    """Changes to a payment. Moving it to another document is allowed."""
    amount: Optional[Decimal] = Field(None, gt=0)
    payment_date: Optional[date] = None
    type: Optional[PaymentType] = None
    method: Optional[PaymentMethod] = None
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    invoice_id: Optional[UUID] = None
    truck_hiring_note_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None

    @model_validator(mode="after")
    def check_single_target(self):
        if self.invoice_id is not None and self.truck_hiring_note_id is not None:
            raise ValueError("A payment belongs to an invoice or a truck hiring note, not both")
        return self


class PaymentOut(BaseModel):
    id: UUID
    amount: Decimal
    payment_date: date
    type: PaymentType
    method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    invoice_id: Optional[UUID] = None
    truck_hiring_note_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentList(BaseModel):
    items: List[PaymentOut]
    total: int
    limit: int
    offset: int


class PaymentFilters(BaseModel):
    invoice_id: Optional[UUID] = None
    truck_hiring_note_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class SettlementOut(BaseModel):
    """Where a document stands after reconciliation"""
    target_total: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: PaymentStatus
