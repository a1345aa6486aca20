from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID
from datetime import datetime
from enum import Enum


class DocumentType(str, Enum):
    LR = "lr"
    INVOICE = "invoice"
    THN = "thn"


class NumberingRangeUpsert(BaseModel):
    document_type: DocumentType
    prefix: str = Field("", max_length=10)
    start_number: int = Field(..., ge=0)
    end_number: int = Field(..., ge=0)
    allow_manual_entry: bool = False
    allow_outside_range: bool = False


class NumberingRangeOut(BaseModel):
    id: UUID
    document_type: DocumentType
    prefix: str
    start_number: int
    end_number: int
    current_number: int
    allow_manual_entry: bool
    allow_outside_range: bool
    is_exhausted: bool
    remaining: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CurrentNumberUpdate(BaseModel):
    document_type: DocumentType
    current_number: int = Field(..., ge=0)


class NextNumberOut(BaseModel):
    document_type: DocumentType
    number: Optional[int] = None
    formatted: Optional[str] = None
    exhausted: bool = False
