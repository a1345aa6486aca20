from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime
from app.common.validators import format_vehicle_number
from app.modules.payments.models import PaymentStatus, PaymentMethod


class TruckHiringNoteBase(BaseModel):
    thn_date: date = Field(default_factory=date.today)
    supplier_id: Optional[UUID] = None
    truck_owner_name: str = Field(..., min_length=1, max_length=150)
    truck_number: str = Field(..., min_length=1, max_length=20)
    driver_name: str = Field(..., min_length=1, max_length=100)
    driver_license: str = Field(..., min_length=1, max_length=50)
    origin: str = Field(..., min_length=1, max_length=100)
    destination: str = Field(..., min_length=1, max_length=100)
    goods_type: str = Field(..., min_length=1, max_length=100)
    weight: Decimal = Field(..., ge=0)
    expected_delivery_date: Optional[date] = None
    special_instructions: Optional[str] = None

    @field_validator("truck_number")
    @classmethod
    def normalize_truck_number(cls, v):
        return format_vehicle_number(v) or v.strip().upper()


class TruckHiringNoteCreate(TruckHiringNoteBase):
    thn_number: Optional[int] = Field(None, gt=0, description="Manual number, only when the THN range allows it")
    freight: Decimal = Field(..., gt=0)
    advance_paid: Decimal = Field(Decimal("0"), ge=0)
    advance_method: PaymentMethod = PaymentMethod.CASH

    @model_validator(mode="after")
    def advance_within_freight(self):
        if self.advance_paid > self.freight:
            raise ValueError("Advance cannot exceed the freight")
        return self


class TruckHiringNoteUpdate(BaseModel):
    """Editable fields. The advance is a payment once recorded and is changed through /payments."""
    thn_date: Optional[date] = None
    supplier_id: Optional[UUID] = None
    truck_owner_name: Optional[str] = Field(None, min_length=1, max_length=150)
    truck_number: Optional[str] = Field(None, min_length=1, max_length=20)
    driver_name: Optional[str] = Field(None, min_length=1, max_length=100)
    driver_license: Optional[str] = Field(None, min_length=1, max_length=50)
    origin: Optional[str] = Field(None, min_length=1, max_length=100)
    destination: Optional[str] = Field(None, min_length=1, max_length=100)
    goods_type: Optional[str] = Field(None, min_length=1, max_length=100)
    weight: Optional[Decimal] = Field(None, ge=0)
    freight: Optional[Decimal] = Field(None, gt=0)
    expected_delivery_date: Optional[date] = None
    special_instructions: Optional[str] = None

    @field_validator("truck_number")
    @classmethod
    def normalize_truck_number(cls, v):
        if v is None:
            return v
        return format_vehicle_number(v) or v.strip().upper()


class TruckHiringNoteOut(TruckHiringNoteBase):
    id: UUID
    thn_number: int
    freight: Decimal
    advance_paid: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    status: PaymentStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TruckHiringNoteList(BaseModel):
    items: List[TruckHiringNoteOut]
    total: int
    limit: int
    offset: int


class TruckHiringNoteFilters(BaseModel):
    status: Optional[PaymentStatus] = None
    supplier_id: Optional[UUID] = None
    truck_number: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
