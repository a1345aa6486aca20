from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.database.database import get_db
from app.modules.numbering.service import NumberingService
from app.modules.numbering.schemas import (
    DocumentType, NumberingRangeUpsert, NumberingRangeOut, CurrentNumberUpdate, NextNumberOut
)

router = APIRouter(prefix="/numbering", tags=["Numbering"])


@router.get("/configs", response_model=List[NumberingRangeOut])
def list_configs(db: Session = Depends(get_db)):
    """List the numbering range of every document type"""
    return NumberingService(db).list_ranges()


@router.post("/configs", response_model=NumberingRangeOut)
def save_config(data: NumberingRangeUpsert, db: Session = Depends(get_db)):
    """
    Create or update the range for a document type.

    Editing a range keeps the current number unless it falls outside the
    new bounds.
    """
    return NumberingService(db).upsert_range(data)


@router.get("/configs/{document_type}", response_model=NumberingRangeOut)
def get_config(document_type: DocumentType, db: Session = Depends(get_db)):
    return NumberingService(db).get_range(document_type)


@router.post("/update-current", response_model=NumberingRangeOut)
def update_current_number(data: CurrentNumberUpdate, db: Session = Depends(get_db)):
    return NumberingService(db).set_current_number(data)


@router.get("/next/{document_type}", response_model=NextNumberOut)
def next_number(document_type: DocumentType, db: Session = Depends(get_db)):
    """Consume and return the next number"""
    return NumberingService(db).next_number(document_type)


@router.get("/peek/{document_type}", response_model=NextNumberOut)
def peek_number(document_type: DocumentType, db: Session = Depends(get_db)):
    """Next number without consuming it"""
    return NumberingService(db).peek_number(document_type)
