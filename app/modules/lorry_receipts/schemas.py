from pydantic import BaseModel, ConfigDict, Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime
from app.modules.lorry_receipts.models import LorryReceiptStatus, GstPayableBy


class PackageItem(BaseModel):
    count: int = Field(..., gt=0)
    packing_method: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=200)
    actual_weight: Decimal = Field(..., ge=0)
    charged_weight: Decimal = Field(..., ge=0)


class Insurance(BaseModel):
    has_insured: bool = False
    company: Optional[str] = None
    policy_no: Optional[str] = None
    policy_date: Optional[date] = None
    amount: Optional[Decimal] = None
    risk: Optional[str] = None


class LrCharges(BaseModel):
    freight: Decimal = Field(Decimal("0"), ge=0)
    aoc: Decimal = Field(Decimal("0"), ge=0)
    hamali: Decimal = Field(Decimal("0"), ge=0)
    b_ch: Decimal = Field(Decimal("0"), ge=0)
    tr_ch: Decimal = Field(Decimal("0"), ge=0)
    detention_ch: Decimal = Field(Decimal("0"), ge=0)

    @property
    def total(self) -> Decimal:
        return self.freight + self.aoc + self.hamali + self.b_ch + self.tr_ch + self.detention_ch


class LorryReceiptCreate(BaseModel):
    lr_number: Optional[int] = Field(None, gt=0, description="Manual number, only when the LR range allows it")
    lr_date: date = Field(default_factory=date.today)
    reporting_date: Optional[date] = None
    delivery_date: Optional[date] = None
    consignor_id: UUID
    consignee_id: UUID
    vehicle_id: UUID
    from_place: str = Field(..., min_length=1, max_length=100)
    to_place: str = Field(..., min_length=1, max_length=100)
    packages: List[PackageItem] = Field(default_factory=list)
    charges: LrCharges = Field(default_factory=LrCharges)
    eway_bill_no: Optional[str] = Field(None, max_length=50)
    value_goods: Optional[Decimal] = Field(None, ge=0)
    gst_payable_by: GstPayableBy = GstPayableBy.CONSIGNOR
    insurance: Optional[Insurance] = None
    invoice_no: Optional[str] = Field(None, max_length=50)
    seal_no: Optional[str] = Field(None, max_length=50)
    remarks: Optional[str] = None


class LorryReceiptUpdate(BaseModel):
    lr_date: Optional[date] = None
    reporting_date: Optional[date] = None
    delivery_date: Optional[date] = None
    consignor_id: Optional[UUID] = None
    consignee_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    from_place: Optional[str] = Field(None, min_length=1, max_length=100)
    to_place: Optional[str] = Field(None, min_length=1, max_length=100)
    packages: Optional[List[PackageItem]] = None
    charges: Optional[LrCharges] = None
    eway_bill_no: Optional[str] = Field(None, max_length=50)
    value_goods: Optional[Decimal] = Field(None, ge=0)
    gst_payable_by: Optional[GstPayableBy] = None
    insurance: Optional[Insurance] = None
    invoice_no: Optional[str] = Field(None, max_length=50)
    seal_no: Optional[str] = Field(None, max_length=50)
    remarks: Optional[str] = None


class LorryReceiptStatusUpdate(BaseModel):
    status: LorryReceiptStatus
    delivery_date: Optional[date] = None


class LorryReceiptOut(BaseModel):
    id: UUID
    lr_number: int
    lr_date: date
    reporting_date: Optional[date] = None
    delivery_date: Optional[date] = None
    consignor_id: UUID
    consignee_id: UUID
    vehicle_id: UUID
    from_place: str
    to_place: str
    packages: List[PackageItem] = Field(default_factory=list)
    freight: Decimal
    aoc: Decimal
    hamali: Decimal
    b_ch: Decimal
    tr_ch: Decimal
    detention_ch: Decimal
    total_amount: Decimal
    eway_bill_no: Optional[str] = None
    value_goods: Optional[Decimal] = None
    gst_payable_by: GstPayableBy
    insurance: Optional[Insurance] = None
    invoice_no: Optional[str] = None
    seal_no: Optional[str] = None
    status: LorryReceiptStatus
    invoice_id: Optional[UUID] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LorryReceiptList(BaseModel):
    items: List[LorryReceiptOut]
    total: int
    limit: int
    offset: int


class LorryReceiptFilters(BaseModel):
    status: Optional[LorryReceiptStatus] = None
    customer_id: Optional[UUID] = None
    uninvoiced_only: bool = False
    date_from: Optional[date] = None
    date_to: Optional[date] = None
