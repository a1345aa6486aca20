from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime
import re

from app.common.validators import validate_gstin, validate_indian_phone, format_vehicle_number


# ===== CUSTOMERS =====

class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    trade_name: Optional[str] = Field(None, max_length=200)
    address: str = ""
    state: str = Field("", max_length=100)
    gstin: Optional[str] = Field(None, max_length=15)
    contact_person: Optional[str] = Field(None, max_length=100)
    contact_phone: Optional[str] = Field(None, max_length=20)
    contact_email: Optional[str] = Field(None, max_length=100)

    @field_validator('gstin')
    @classmethod
    def validate_gstin_format(cls, v):
        if v is None or v.strip() == "":
            return None
        if not validate_gstin(v):
            raise ValueError('GSTIN must look like 33ITWPS2062F1Z7')
        return v.strip().upper()

    @field_validator('contact_phone')
    @classmethod
    def validate_phone(cls, v):
        if v is None or v.strip() == "":
            return None
        if not validate_indian_phone(v):
            raise ValueError('Phone must be a 10 digit mobile number, optionally prefixed by +91')
        return v

    @field_validator('contact_email')
    @classmethod
    def validate_email(cls, v):
        if v and v.strip():
            pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
            if not re.match(pattern, v):
                raise ValueError('Email is not valid')
        return v


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(CustomerBase):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = None
    state: Optional[str] = Field(None, max_length=100)


class CustomerOut(CustomerBase):
    id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerList(BaseModel):
    items: List[CustomerOut]
    total: int
    limit: int
    offset: int


# ===== VEHICLES =====

class VehicleCreate(BaseModel):
    number: str = Field(..., min_length=4, max_length=20)

    @field_validator('number')
    @classmethod
    def validate_number(cls, v):
        formatted = format_vehicle_number(v)
        if formatted is None:
            raise ValueError('Vehicle number must look like TN 20 AX 1234')
        return formatted


class VehicleOut(BaseModel):
    id: UUID
    number: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===== SUPPLIERS =====

class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact_person: Optional[str] = Field(None, max_length=100)
    contact_phone: Optional[str] = Field(None, max_length=20)
    contact_email: Optional[str] = Field(None, max_length=100)
    payment_terms: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator('contact_phone')
    @classmethod
    def validate_phone(cls, v):
        if v is None or v.strip() == "":
            return None
        if not validate_indian_phone(v):
            raise ValueError('Phone must be a 10 digit mobile number, optionally prefixed by +91')
        return v


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(SupplierBase):
    name: Optional[str] = Field(None, min_length=1, max_length=200)


class SupplierOut(SupplierBase):
    id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
