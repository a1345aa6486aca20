from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.modules.payments.models import PaymentStatus
from app.modules.truck_hiring_notes.service import TruckHiringNoteService
from app.modules.truck_hiring_notes.schemas import (
    TruckHiringNoteCreate, TruckHiringNoteUpdate, TruckHiringNoteOut, TruckHiringNoteList, TruckHiringNoteFilters
)

router = APIRouter(prefix="/truck-hiring-notes", tags=["Truck Hiring Notes"])


@router.post("/", response_model=TruckHiringNoteOut, status_code=status.HTTP_201_CREATED)
def create_truck_hiring_note(data: TruckHiringNoteCreate, db: Session = Depends(get_db)):
    """Hire a truck. An advance is booked as the first payment."""
    return TruckHiringNoteService(db).create_truck_hiring_note(data)


@router.get("/", response_model=TruckHiringNoteList)
def list_truck_hiring_notes(
    status: Optional[PaymentStatus] = Query(None),
    supplier_id: Optional[UUID] = Query(None),
    truck_number: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    filters = TruckHiringNoteFilters(
        status=status, supplier_id=supplier_id, truck_number=truck_number, date_from=date_from, date_to=date_to
    )
    return TruckHiringNoteService(db).get_truck_hiring_notes(filters, limit, offset)


@router.get("/{thn_id}", response_model=TruckHiringNoteOut)
def get_truck_hiring_note(thn_id: UUID, db: Session = Depends(get_db)):
    return TruckHiringNoteService(db).get_truck_hiring_note_by_id(thn_id)


@router.patch("/{thn_id}", response_model=TruckHiringNoteOut)
def update_truck_hiring_note(thn_id: UUID, data: TruckHiringNoteUpdate, db: Session = Depends(get_db)):
    return TruckHiringNoteService(db).update_truck_hiring_note(thn_id, data)


@router.delete("/{thn_id}")
def delete_truck_hiring_note(thn_id: UUID, db: Session = Depends(get_db)):
    """Delete a THN. Refused while it has payments, including its advance."""
    return TruckHiringNoteService(db).delete_truck_hiring_note(thn_id)
