from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.modules.payments.service import PaymentService
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate, PaymentOut, PaymentList, PaymentFilters

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(data: PaymentCreate, db: Session = Depends(get_db)):
    """
    Record a payment against an invoice or a truck hiring note.

    The target document's status is recomputed afterwards. Overpayment is
    accepted.
    """
    return PaymentService(db).create_payment(data)


@router.get("/", response_model=PaymentList)
def list_payments(
    invoice_id: Optional[UUID] = Query(None),
    truck_hiring_note_id: Optional[UUID] = Query(None),
    customer_id: Optional[UUID] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    filters = PaymentFilters(
        invoice_id=invoice_id,
        truck_hiring_note_id=truck_hiring_note_id,
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to
    )
    return PaymentService(db).get_payments(filters, limit, offset)


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: UUID, db: Session = Depends(get_db)):
    return PaymentService(db).get_payment_by_id(payment_id)


@router.patch("/{payment_id}", response_model=PaymentOut)
def update_payment(payment_id: UUID, data: PaymentUpdate, db: Session = Depends(get_db)):
    return PaymentService(db).update_payment(payment_id, data)


@router.delete("/{payment_id}")
def delete_payment(payment_id: UUID, db: Session = Depends(get_db)):
    return PaymentService(db).delete_payment(payment_id)
