from pydantic import BaseModel
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from datetime import date
import enum


class LedgerEntryType(enum.Enum):
    INVOICE = "invoice"
    PAYMENT = "payment"


class BalanceSide(enum.Enum):
    DEBIT = "Dr"
    CREDIT = "Cr"


class LedgerFilters(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    entry_type: Optional[LedgerEntryType] = None


class LedgerEntry(BaseModel):
    entry_type: LedgerEntryType
    entry_date: date
    document_id: UUID
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    particulars: str
    debit: Decimal
    credit: Decimal
    balance: Optional[Decimal] = None  # Running balance, customer ledger only


class CustomerLedger(BaseModel):
    customer_id: UUID
    customer_name: str
    entries: List[LedgerEntry]
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal
    closing_side: BalanceSide
    unbilled_amount: Decimal  # Charges on LRs not yet invoiced


class CompanyLedger(BaseModel):
    entries: List[LedgerEntry]
    total_debit: Decimal
    total_credit: Decimal
    net_balance: Decimal
