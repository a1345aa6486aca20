from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import Dict, Set, Tuple
from uuid import UUID
import logging

from app.common.exceptions import NotFound
from app.modules.invoices.models import Invoice
from app.modules.masters.models import Customer
from app.modules.payments.models import Payment
from app.modules.payments.reconciliation import reconcile_invoice, reconcile_thn
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate, PaymentFilters, PaymentList
from app.modules.truck_hiring_notes.models import TruckHiringNote

logger = logging.getLogger(__name__)


def _target_of(payment: Payment) -> Tuple[str, UUID]:
    if payment.invoice_id is not None:
        return "invoice", payment.invoice_id
    return "thn", payment.truck_hiring_note_id


class PaymentService:
    """
    Payments against invoices and truck hiring notes.

    Every write is saved and committed first, then the affected documents are
    reconciled. A reconciliation failure is logged and leaves the payment saved.
    """

    def __init__(self, db: Session):
        self.db = db

    def _validate_target(self, invoice_id=None, thn_id=None, customer_id=None):
        if invoice_id is not None and not self.db.get(Invoice, invoice_id):
            raise NotFound(f"Invoice {invoice_id} not found")
        if thn_id is not None and not self.db.get(TruckHiringNote, thn_id):
            raise NotFound(f"Truck hiring note {thn_id} not found")
        if customer_id is not None and not self.db.get(Customer, customer_id):
            raise NotFound(f"Customer {customer_id} not found")

    def _reconcile(self, targets: Set[Tuple[str, UUID]]):
        for kind, target_id in targets:
            if kind == "invoice":
                reconcile_invoice(self.db, target_id)
            else:
                reconcile_thn(self.db, target_id)

    def create_payment(self, data: PaymentCreate) -> Payment:
        try:
            self._validate_target(data.invoice_id, data.truck_hiring_note_id, data.customer_id)

            customer_id = data.customer_id
            if customer_id is None and data.invoice_id is not None:
                customer_id = self.db.get(Invoice, data.invoice_id).customer_id

            payment = Payment(**data.model_dump(exclude={"customer_id"}), customer_id=customer_id)
            self.db.add(payment)
            self.db.commit()
            self.db.refresh(payment)

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error recording payment: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error recording payment: {str(e)}"
            )

        logger.info(f"Recorded {payment.type.value} payment of {payment.amount} against {_target_of(payment)[0]}")
        self._reconcile({_target_of(payment)})
        self.db.refresh(payment)
        return payment

    def get_payments(self, filters: PaymentFilters, limit: int = 100, offset: int = 0) -> PaymentList:
        query = self.db.query(Payment)

        if filters.invoice_id:
            query = query.filter(Payment.invoice_id == filters.invoice_id)
        if filters.truck_hiring_note_id:
            query = query.filter(Payment.truck_hiring_note_id == filters.truck_hiring_note_id)
        if filters.customer_id:
            query = query.filter(Payment.customer_id == filters.customer_id)
        if filters.date_from:
            query = query.filter(Payment.payment_date >= filters.date_from)
        if filters.date_to:
            query = query.filter(Payment.payment_date <= filters.date_to)

        total = query.count()
        items = query.order_by(Payment.payment_date.desc(), Payment.created_at.desc()).offset(offset).limit(limit).all()
        return PaymentList(items=items, total=total, limit=limit, offset=offset)

    def get_payment_by_id(self, payment_id: UUID) -> Payment:
        payment = self.db.get(Payment, payment_id)
        if not payment:
            raise NotFound("Payment not found")
        return payment

    def update_payment(self, payment_id: UUID, data: PaymentUpdate) -> Payment:
        """Update a payment and reconcile both its old and its new document"""
        payment = self.get_payment_by_id(payment_id)
        old_target = _target_of(payment)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        try:
            self._validate_target(
                changes.get("invoice_id"), changes.get("truck_hiring_note_id"), changes.get("customer_id")
            )

            # Retargeting replaces the previous document link and its customer
            if "invoice_id" in changes:
                payment.truck_hiring_note_id = None
                if "customer_id" not in changes:
                    payment.customer_id = self.db.get(Invoice, changes["invoice_id"]).customer_id
            if "truck_hiring_note_id" in changes:
                payment.invoice_id = None
                if "customer_id" not in changes:
                    payment.customer_id = None

            for field, value in changes.items():
                setattr(payment, field, value)

            self.db.commit()
            self.db.refresh(payment)

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating payment {payment_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating payment: {str(e)}"
            )

        self._reconcile({old_target, _target_of(payment)})
        self.db.refresh(payment)
        return payment

    def delete_payment(self, payment_id: UUID) -> Dict[str, str]:
        payment = self.get_payment_by_id(payment_id)
        target = _target_of(payment)
        amount = payment.amount

        self.db.delete(payment)
        self.db.commit()
        logger.info(f"Deleted payment {payment_id} of {amount}")

        self._reconcile({target})
        return {"message": "Payment deleted"}
