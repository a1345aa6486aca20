from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from decimal import Decimal
from typing import Dict
from uuid import UUID
import logging

from app.common.exceptions import DuplicateNumber, LrStatusConflict, NotFound
from app.modules.lorry_receipts import lifecycle
from app.modules.lorry_receipts.models import LorryReceipt, LorryReceiptStatus
from app.modules.lorry_receipts.schemas import (
    LorryReceiptCreate, LorryReceiptUpdate, LorryReceiptStatusUpdate,
    LorryReceiptFilters, LorryReceiptList, LrCharges
)
from app.modules.masters.models import Customer, Vehicle
from app.modules.numbering.sequence import assign_number

logger = logging.getLogger(__name__)

SEQUENCE_NAME = "lr"


class LorryReceiptService:
    def __init__(self, db: Session):
        self.db = db

    def _validate_references(self, consignor_id=None, consignee_id=None, vehicle_id=None):
        for customer_id in (consignor_id, consignee_id):
            if customer_id and not self.db.get(Customer, customer_id):
                raise NotFound(f"Customer {customer_id} not found")
        if vehicle_id and not self.db.get(Vehicle, vehicle_id):
            raise NotFound(f"Vehicle {vehicle_id} not found")

    @staticmethod
    def _apply_charges(lr: LorryReceipt, charges: LrCharges):
        for field in LorryReceipt.CHARGE_FIELDS:
            setattr(lr, field, getattr(charges, field))
        lr.total_amount = charges.total

    def create_lorry_receipt(self, data: LorryReceiptCreate) -> LorryReceipt:
        """Create an LR, taking its number from the LR range unless one is given"""
        lr_number = data.lr_number
        try:
            self._validate_references(data.consignor_id, data.consignee_id, data.vehicle_id)

            lr_number = assign_number(self.db, SEQUENCE_NAME, LorryReceipt.lr_number, data.lr_number)

            lr = LorryReceipt(
                lr_number=lr_number,
                lr_date=data.lr_date,
                reporting_date=data.reporting_date,
                delivery_date=data.delivery_date,
                consignor_id=data.consignor_id,
                consignee_id=data.consignee_id,
                vehicle_id=data.vehicle_id,
                from_place=data.from_place,
                to_place=data.to_place,
                packages=[p.model_dump(mode="json") for p in data.packages],
                eway_bill_no=data.eway_bill_no,
                value_goods=data.value_goods,
                gst_payable_by=data.gst_payable_by,
                insurance=data.insurance.model_dump(mode="json") if data.insurance else None,
                invoice_no=data.invoice_no,
                seal_no=data.seal_no,
                remarks=data.remarks,
                status=LorryReceiptStatus.CREATED
            )
            self._apply_charges(lr, data.charges)

            self.db.add(lr)
            self.db.commit()
            self.db.refresh(lr)

            logger.info(f"Created LR {lr.lr_number} ({lr.from_place} -> {lr.to_place})")
            return lr

        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            if "uq_lorry_receipts_lr_number" in str(e) or "lorry_receipts.lr_number" in str(e):
                raise DuplicateNumber("LR", lr_number)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Integrity error: {str(e)}"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating LR: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating lorry receipt: {str(e)}"
            )

    def get_lorry_receipts(self, filters: LorryReceiptFilters, limit: int = 100, offset: int = 0) -> LorryReceiptList:
        query = self.db.query(LorryReceipt)

        if filters.status:
            query = query.filter(LorryReceipt.status == filters.status)
        if filters.customer_id:
            query = query.filter(or_(
                LorryReceipt.consignor_id == filters.customer_id,
                LorryReceipt.consignee_id == filters.customer_id
            ))
        if filters.uninvoiced_only:
            query = query.filter(~LorryReceipt.invoice_link.has())
        if filters.date_from:
            query = query.filter(LorryReceipt.lr_date >= filters.date_from)
        if filters.date_to:
            query = query.filter(LorryReceipt.lr_date <= filters.date_to)

        total = query.count()
        items = query.order_by(LorryReceipt.lr_number.desc()).offset(offset).limit(limit).all()
        return LorryReceiptList(items=items, total=total, limit=limit, offset=offset)

    def get_lorry_receipt_by_id(self, lr_id: UUID) -> LorryReceipt:
        lr = self.db.get(LorryReceipt, lr_id)
        if not lr:
            raise NotFound("Lorry receipt not found")
        return lr

    def update_lorry_receipt(self, lr_id: UUID, data: LorryReceiptUpdate) -> LorryReceipt:
        """Edit an LR. Charges are frozen while the LR is on an invoice."""
        lr = self.get_lorry_receipt_by_id(lr_id)
        changes = data.model_dump(exclude_unset=True)

        self._validate_references(
            changes.get("consignor_id"), changes.get("consignee_id"), changes.get("vehicle_id")
        )

        if data.charges is not None:
            if lr.invoice_link is not None:
                raise LrStatusConflict(
                    f"Lorry receipt {lr.lr_number} is on invoice "
                    f"{lr.invoice_link.invoice.invoice_number}; remove it before changing charges"
                )
            self._apply_charges(lr, data.charges)
        changes.pop("charges", None)

        if "packages" in changes:
            changes["packages"] = [p.model_dump(mode="json") for p in data.packages or []]
        if "insurance" in changes:
            changes["insurance"] = data.insurance.model_dump(mode="json") if data.insurance else None

        for field, value in changes.items():
            setattr(lr, field, value)

        self.db.commit()
        self.db.refresh(lr)
        return lr

    def set_status(self, lr_id: UUID, data: LorryReceiptStatusUpdate) -> LorryReceipt:
        """Manual status change: in transit, delivered, paid"""
        lr = self.get_lorry_receipt_by_id(lr_id)
        lifecycle.ensure_manual_transition(lr, data.status)

        old_status = lr.status
        lr.status = data.status
        if data.status == LorryReceiptStatus.DELIVERED and data.delivery_date:
            lr.delivery_date = data.delivery_date

        self.db.commit()
        self.db.refresh(lr)
        logger.info(f"LR {lr.lr_number}: {old_status.value} -> {lr.status.value} (manual)")
        return lr

    def delete_lorry_receipt(self, lr_id: UUID) -> Dict[str, str]:
        lr = self.get_lorry_receipt_by_id(lr_id)
        lifecycle.ensure_deletable(lr)

        self.db.delete(lr)
        self.db.commit()
        logger.info(f"Deleted LR {lr.lr_number}")
        return {"message": f"Lorry receipt {lr.lr_number} deleted"}

    def get_outstanding_amount(self, customer_id: UUID) -> Decimal:
        """Charges on the customer's LRs that are not on any invoice yet"""
        rows = self.db.query(LorryReceipt.total_amount).filter(
            LorryReceipt.consignor_id == customer_id,
            ~LorryReceipt.invoice_link.has()
        ).all()
        return sum((Decimal(str(r[0])) for r in rows), Decimal("0"))
