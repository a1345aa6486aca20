from pydantic import BaseModel, ConfigDict, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime
from app.modules.invoices.models import GstType
from app.modules.payments.models import PaymentStatus
from app.modules.lorry_receipts.schemas import LorryReceiptOut
from app.modules.payments.schemas import PaymentOut


class GstFields(BaseModel):
    gst_type: GstType = GstType.CGST_SGST
    cgst_rate: Decimal = Field(Decimal("9"), ge=0, le=100)
    sgst_rate: Decimal = Field(Decimal("9"), ge=0, le=100)
    igst_rate: Decimal = Field(Decimal("18"), ge=0, le=100)
    is_rcm: bool = False
    is_manual_gst: bool = False
    # Only read when is_manual_gst is set
    cgst_amount: Decimal = Field(Decimal("0"), ge=0)
    sgst_amount: Decimal = Field(Decimal("0"), ge=0)
    igst_amount: Decimal = Field(Decimal("0"), ge=0)


class InvoiceCreate(GstFields):
    invoice_number: Optional[int] = Field(None, gt=0, description="Manual number, only when the invoice range allows it")
    invoice_date: date = Field(default_factory=date.today)
    customer_id: UUID
    lorry_receipt_ids: List[UUID] = Field(..., min_length=1, description="LRs to bill, in print order")
    remarks: Optional[str] = None

    @field_validator("lorry_receipt_ids")
    @classmethod
    def no_duplicate_lrs(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("A lorry receipt can only be listed once")
        return v


class InvoiceUpdate(BaseModel):
    invoice_date: Optional[date] = None
    customer_id: Optional[UUID] = None
    lorry_receipt_ids: Optional[List[UUID]] = Field(None, min_length=1)
    remarks: Optional[str] = None
    gst_type: Optional[GstType] = None
    cgst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    sgst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    igst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    is_rcm: Optional[bool] = None
    is_manual_gst: Optional[bool] = None
    cgst_amount: Optional[Decimal] = Field(None, ge=0)
    sgst_amount: Optional[Decimal] = Field(None, ge=0)
    igst_amount: Optional[Decimal] = Field(None, ge=0)

    @field_validator("lorry_receipt_ids")
    @classmethod
    def no_duplicate_lrs(cls, v):
        if v is not None and len(set(v)) != len(v):
            raise ValueError("A lorry receipt can only be listed once")
        return v


class InvoiceTotals(BaseModel):
    total_amount: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    grand_total: Decimal


class InvoiceOut(BaseModel):
    id: UUID
    invoice_number: int
    invoice_date: date
    customer_id: UUID
    lorry_receipt_ids: List[UUID]
    remarks: Optional[str] = None
    total_amount: Decimal
    gst_type: GstType
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    grand_total: Decimal
    is_rcm: bool
    is_manual_gst: bool
    status: PaymentStatus
    paid_amount: Decimal
    balance_due: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceDetail(InvoiceOut):
    lorry_receipts: List[LorryReceiptOut] = Field(default_factory=list)
    payments: List[PaymentOut] = Field(default_factory=list)

    @field_validator("lorry_receipts", mode="before")
    @classmethod
    def proxy_to_list(cls, v):
        return list(v) if v is not None else []


class InvoiceList(BaseModel):
    items: List[InvoiceOut]
    total: int
    limit: int
    offset: int


class InvoiceFilters(BaseModel):
    status: Optional[PaymentStatus] = None
    customer_id: Optional[UUID] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
