"""
Derived payment status for invoices and truck hiring notes.

Status is recomputed from the full set of payments on every call, so running
a reconciliation twice gives the same result. Reconciliation is best effort:
a failure is logged and rolled back, and never fails the payment that
triggered it.
"""
import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.modules.invoices.models import Invoice
from app.modules.lorry_receipts import lifecycle
from app.modules.payments.models import Payment, PaymentStatus, PaymentType
from app.modules.truck_hiring_notes.models import TruckHiringNote

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def classify_payment_status(paid: Decimal, target: Decimal) -> PaymentStatus:
    """UNPAID when nothing is paid, PAID once ``paid`` reaches ``target``, else PARTIALLY_PAID"""
    if paid <= ZERO:
        return PaymentStatus.UNPAID
    if paid >= target:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIALLY_PAID


def total_paid(db: Session, invoice_id: UUID = None, thn_id: UUID = None, payment_type: PaymentType = None) -> Decimal:
    query = db.query(func.coalesce(func.sum(Payment.amount), 0))
    if invoice_id is not None:
        query = query.filter(Payment.invoice_id == invoice_id)
    else:
        query = query.filter(Payment.truck_hiring_note_id == thn_id)
    if payment_type is not None:
        query = query.filter(Payment.type == payment_type)
    return Decimal(str(query.scalar()))


def reconcile_invoice(db: Session, invoice_id: UUID) -> None:
    """Recompute an invoice's status from its payments and commit it"""
    try:
        invoice = db.get(Invoice, invoice_id)
        if invoice is None:
            logger.info(f"Invoice {invoice_id} not found for status update, skipping")
            return

        paid = total_paid(db, invoice_id=invoice_id)
        new_status = classify_payment_status(paid, Decimal(str(invoice.grand_total)))

        if invoice.status != new_status:
            logger.info(
                f"Invoice {invoice.invoice_number}: {invoice.status.value} -> {new_status.value} "
                f"(paid {paid} of {invoice.grand_total})"
            )
            was_paid = invoice.status == PaymentStatus.PAID
            invoice.status = new_status
            if settings.LR_PAID_ON_INVOICE_PAID:
                if new_status == PaymentStatus.PAID:
                    lifecycle.mark_paid(db, invoice.lorry_receipt_ids)
                elif was_paid:
                    lifecycle.unmark_paid(db, invoice.lorry_receipt_ids)
            db.commit()

    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update status for invoice {invoice_id}: {e}", exc_info=True)


def reconcile_thn(db: Session, thn_id: UUID) -> None:
    """Recompute a THN's advance, paid amount, balance and status and commit them"""
    try:
        thn = db.get(TruckHiringNote, thn_id)
        if thn is None:
            logger.info(f"Truck hiring note {thn_id} not found for status update, skipping")
            return

        paid = total_paid(db, thn_id=thn_id)
        freight = Decimal(str(thn.freight))
        new_status = classify_payment_status(paid, freight)

        thn.advance_paid = total_paid(db, thn_id=thn_id, payment_type=PaymentType.ADVANCE)
        thn.paid_amount = paid
        thn.balance_amount = freight - paid
        if thn.status != new_status:
            logger.info(f"THN {thn.thn_number}: {thn.status.value} -> {new_status.value} (paid {paid} of {freight})")
            thn.status = new_status
        db.commit()

    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update status for THN {thn_id}: {e}", exc_info=True)
