from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from app.database.database import get_db
from app.modules.ledgers.service import LedgerService
from app.modules.ledgers.schemas import CompanyLedger, CustomerLedger, LedgerEntryType, LedgerFilters

router = APIRouter(prefix="/ledgers", tags=["Ledgers"])


def _filters(date_from: Optional[date], date_to: Optional[date], entry_type: Optional[LedgerEntryType]) -> LedgerFilters:
    if date_from and date_to and date_to < date_from:
        raise HTTPException(422, "date_to must be greater than or equal to date_from")
    return LedgerFilters(date_from=date_from, date_to=date_to, entry_type=entry_type)


@router.get("/customers/{customer_id}", response_model=CustomerLedger)
def get_customer_ledger(
    customer_id: UUID,
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    entry_type: Optional[LedgerEntryType] = Query(None, description="invoice or payment"),
    db: Session = Depends(get_db)
):
    """Invoices and receipts of one customer with a running Dr/Cr balance."""
    return LedgerService(db).get_customer_ledger(customer_id, _filters(date_from, date_to, entry_type))


@router.get("/company", response_model=CompanyLedger)
def get_company_ledger(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    entry_type: Optional[LedgerEntryType] = Query(None, description="invoice or payment"),
    db: Session = Depends(get_db)
):
    return LedgerService(db).get_company_ledger(_filters(date_from, date_to, entry_type))
