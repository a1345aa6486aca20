from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.schemas import InvoiceCreate, InvoiceUpdate, InvoiceDetail, InvoiceList, InvoiceFilters
from app.modules.payments.models import PaymentStatus

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post("/", response_model=InvoiceDetail, status_code=status.HTTP_201_CREATED)
def create_invoice(data: InvoiceCreate, db: Session = Depends(get_db)):
    """
    Create an invoice for a set of lorry receipts.

    The listed LRs move to INVOICED. An LR already billed on another invoice
    is refused. New invoices start UNPAID.
    """
    return InvoiceService(db).create_invoice(data)


@router.get("/", response_model=InvoiceList)
def list_invoices(
    status: Optional[PaymentStatus] = Query(None),
    customer_id: Optional[UUID] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    filters = InvoiceFilters(status=status, customer_id=customer_id, date_from=date_from, date_to=date_to)
    return InvoiceService(db).get_invoices(filters, limit, offset)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(invoice_id: UUID, db: Session = Depends(get_db)):
    """Invoice with its lorry receipts and payments"""
    return InvoiceService(db).get_invoice_by_id(invoice_id)


@router.patch("/{invoice_id}", response_model=InvoiceDetail)
def update_invoice(invoice_id: UUID, data: InvoiceUpdate, db: Session = Depends(get_db)):
    return InvoiceService(db).update_invoice(invoice_id, data)


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: UUID, db: Session = Depends(get_db)):
    """Delete an invoice. Refused while it has payments; its LRs return to CREATED."""
    return InvoiceService(db).delete_invoice(invoice_id)
