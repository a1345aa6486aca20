from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from decimal import Decimal
from typing import Dict
from uuid import UUID
import logging

from app.common.exceptions import DuplicateNumber, NotFound, ThnHasPayments
from app.modules.masters.models import Supplier
from app.modules.numbering.sequence import assign_number
from app.modules.payments.models import Payment, PaymentStatus, PaymentType
from app.modules.payments.reconciliation import reconcile_thn
from app.modules.truck_hiring_notes.models import TruckHiringNote
from app.modules.truck_hiring_notes.schemas import (
    TruckHiringNoteCreate, TruckHiringNoteUpdate, TruckHiringNoteFilters, TruckHiringNoteList
)

logger = logging.getLogger(__name__)

SEQUENCE_NAME = "thn"


class TruckHiringNoteService:
    def __init__(self, db: Session):
        self.db = db

    def _validate_supplier(self, supplier_id: UUID):
        if supplier_id is not None and not self.db.get(Supplier, supplier_id):
            raise NotFound(f"Supplier {supplier_id} not found")

    def create_truck_hiring_note(self, data: TruckHiringNoteCreate) -> TruckHiringNote:
        """
        Create a THN. A non-zero advance is recorded as an ADVANCE payment
        against it, so paid amount, balance and status start from the advance.
        """
        thn_number = data.thn_number
        try:
            self._validate_supplier(data.supplier_id)
            thn_number = assign_number(self.db, SEQUENCE_NAME, TruckHiringNote.thn_number, data.thn_number)

            thn = TruckHiringNote(
                thn_number=thn_number,
                **data.model_dump(exclude={"thn_number", "advance_method"}),
                paid_amount=Decimal("0"),
                balance_amount=data.freight,
                status=PaymentStatus.UNPAID
            )
            self.db.add(thn)
            self.db.flush()

            if data.advance_paid > 0:
                self.db.add(Payment(
                    amount=data.advance_paid,
                    payment_date=data.thn_date,
                    type=PaymentType.ADVANCE,
                    method=data.advance_method,
                    truck_hiring_note_id=thn.id,
                    notes=f"Advance on THN {thn_number}"
                ))

            self.db.commit()

        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            if "uq_truck_hiring_notes_thn_number" in str(e) or "truck_hiring_notes.thn_number" in str(e):
                raise DuplicateNumber("THN", thn_number)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Integrity error: {str(e)}"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating THN: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating truck hiring note: {str(e)}"
            )

        logger.info(f"Created THN {thn.thn_number} for {thn.truck_number}, freight {thn.freight}")
        reconcile_thn(self.db, thn.id)
        self.db.refresh(thn)
        return thn

    def get_truck_hiring_notes(self, filters: TruckHiringNoteFilters, limit: int = 100, offset: int = 0) -> TruckHiringNoteList:
        query = self.db.query(TruckHiringNote)

        if filters.status:
            query = query.filter(TruckHiringNote.status == filters.status)
        if filters.supplier_id:
            query = query.filter(TruckHiringNote.supplier_id == filters.supplier_id)
        if filters.truck_number:
            query = query.filter(TruckHiringNote.truck_number.ilike(f"%{filters.truck_number}%"))
        if filters.date_from:
            query = query.filter(TruckHiringNote.thn_date >= filters.date_from)
        if filters.date_to:
            query = query.filter(TruckHiringNote.thn_date <= filters.date_to)

        total = query.count()
        items = query.order_by(TruckHiringNote.thn_number.desc()).offset(offset).limit(limit).all()
        return TruckHiringNoteList(items=items, total=total, limit=limit, offset=offset)

    def get_truck_hiring_note_by_id(self, thn_id: UUID) -> TruckHiringNote:
        thn = self.db.get(TruckHiringNote, thn_id)
        if not thn:
            raise NotFound("Truck hiring note not found")
        return thn

    def update_truck_hiring_note(self, thn_id: UUID, data: TruckHiringNoteUpdate) -> TruckHiringNote:
        thn = self.get_truck_hiring_note_by_id(thn_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        self._validate_supplier(changes.get("supplier_id"))
        freight_changed = "freight" in changes and Decimal(str(changes["freight"])) != Decimal(str(thn.freight))

        for field, value in changes.items():
            setattr(thn, field, value)
        self.db.commit()

        if freight_changed:
            logger.info(f"THN {thn.thn_number} freight changed to {thn.freight}")
            reconcile_thn(self.db, thn.id)

        self.db.refresh(thn)
        return thn

    def delete_truck_hiring_note(self, thn_id: UUID) -> Dict[str, str]:
        thn = self.get_truck_hiring_note_by_id(thn_id)

        if thn.payments:
            logger.warning(f"Refused to delete THN {thn.thn_number}: it has payments")
            raise ThnHasPayments()

        number = thn.thn_number
        self.db.delete(thn)
        self.db.commit()
        logger.info(f"Deleted THN {number}")
        return {"message": f"Truck hiring note {number} deleted"}
