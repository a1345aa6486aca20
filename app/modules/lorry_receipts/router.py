from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.modules.lorry_receipts.models import LorryReceiptStatus
from app.modules.lorry_receipts.service import LorryReceiptService
from app.modules.lorry_receipts.schemas import (
    LorryReceiptCreate, LorryReceiptUpdate, LorryReceiptStatusUpdate,
    LorryReceiptOut, LorryReceiptList, LorryReceiptFilters
)

router = APIRouter(prefix="/lorry-receipts", tags=["Lorry Receipts"])


@router.post("/", response_model=LorryReceiptOut, status_code=status.HTTP_201_CREATED)
def create_lorry_receipt(data: LorryReceiptCreate, db: Session = Depends(get_db)):
    """
    Create a lorry receipt.

    The LR number comes from the configured LR range. A manual ``lr_number``
    is accepted only when the range allows manual entry.
    """
    return LorryReceiptService(db).create_lorry_receipt(data)


@router.get("/", response_model=LorryReceiptList)
def list_lorry_receipts(
    status: Optional[LorryReceiptStatus] = Query(None),
    customer_id: Optional[UUID] = Query(None, description="Consignor or consignee"),
    uninvoiced_only: bool = Query(False, description="Only LRs that are not on an invoice"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    filters = LorryReceiptFilters(
        status=status,
        customer_id=customer_id,
        uninvoiced_only=uninvoiced_only,
        date_from=date_from,
        date_to=date_to
    )
    return LorryReceiptService(db).get_lorry_receipts(filters, limit, offset)


@router.get("/{lr_id}", response_model=LorryReceiptOut)
def get_lorry_receipt(lr_id: UUID, db: Session = Depends(get_db)):
    return LorryReceiptService(db).get_lorry_receipt_by_id(lr_id)


@router.patch("/{lr_id}", response_model=LorryReceiptOut)
def update_lorry_receipt(lr_id: UUID, data: LorryReceiptUpdate, db: Session = Depends(get_db)):
    return LorryReceiptService(db).update_lorry_receipt(lr_id, data)


@router.post("/{lr_id}/status", response_model=LorryReceiptOut)
def set_lorry_receipt_status(lr_id: UUID, data: LorryReceiptStatusUpdate, db: Session = Depends(get_db)):
    """Manual status change (in transit, delivered, paid)"""
    return LorryReceiptService(db).set_status(lr_id, data)


@router.delete("/{lr_id}")
def delete_lorry_receipt(lr_id: UUID, db: Session = Depends(get_db)):
    """Delete an LR. Invoiced LRs cannot be deleted."""
    return LorryReceiptService(db).delete_lorry_receipt(lr_id)
