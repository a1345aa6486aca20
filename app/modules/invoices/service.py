from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import desc
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Dict
from uuid import UUID
import logging

from app.common.exceptions import DuplicateNumber, InvoiceHasPayments, NotFound
from app.modules.invoices.models import Invoice, InvoiceLorryReceipt, GstType
from app.modules.invoices.schemas import InvoiceCreate, InvoiceUpdate, InvoiceFilters, InvoiceList, InvoiceTotals
from app.modules.lorry_receipts import lifecycle
from app.modules.lorry_receipts.models import LorryReceipt
from app.modules.masters.models import Customer
from app.modules.numbering.sequence import assign_number
from app.modules.payments.models import PaymentStatus
from app.modules.payments.reconciliation import reconcile_invoice

logger = logging.getLogger(__name__)

SEQUENCE_NAME = "invoice"
CENT = Decimal("0.01")

GST_FIELDS = (
    "gst_type", "cgst_rate", "sgst_rate", "igst_rate",
    "is_rcm", "is_manual_gst", "cgst_amount", "sgst_amount", "igst_amount",
)


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_invoice_totals(lorry_receipts: List[LorryReceipt], gst) -> InvoiceTotals:
    """
    Taxable amount is the sum of the LR totals. GST is computed from the rates
    unless it was entered by hand. Under reverse charge the recipient pays the
    GST, so it is shown but not added to the grand total.
    """
    taxable = sum((Decimal(str(lr.total_amount)) for lr in lorry_receipts), Decimal("0"))

    zero = Decimal("0")
    if gst.is_manual_gst:
        cgst, sgst, igst = gst.cgst_amount, gst.sgst_amount, gst.igst_amount
    else:
        cgst = taxable * Decimal(str(gst.cgst_rate)) / 100
        sgst = taxable * Decimal(str(gst.sgst_rate)) / 100
        igst = taxable * Decimal(str(gst.igst_rate)) / 100

    if gst.gst_type == GstType.CGST_SGST:
        cgst, sgst, igst = _money(cgst), _money(sgst), zero
    else:
        cgst, sgst, igst = zero, zero, _money(igst)
    grand_total = taxable if gst.is_rcm else taxable + cgst + sgst + igst

    return InvoiceTotals(
        total_amount=_money(taxable),
        cgst_amount=cgst,
        sgst_amount=sgst,
        igst_amount=igst,
        grand_total=_money(grand_total)
    )


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def _get_customer(self, customer_id: UUID) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise NotFound(f"Customer {customer_id} not found")
        return customer

    def _apply_totals(self, invoice: Invoice, lorry_receipts: List[LorryReceipt]):
        totals = calculate_invoice_totals(lorry_receipts, invoice)
        for field, value in totals.model_dump().items():
            setattr(invoice, field, value)

    def _set_lorry_receipts(self, invoice: Invoice, lorry_receipts: List[LorryReceipt]):
        """Replace the invoice's LR list, keeping link rows for LRs that stay"""
        existing = {link.lorry_receipt_id: link for link in invoice.lr_links}
        invoice.lr_links = [
            existing.get(lr.id) or InvoiceLorryReceipt(lorry_receipt=lr)
            for lr in lorry_receipts
        ]
        invoice.lr_links.reorder()

    def create_invoice(self, data: InvoiceCreate) -> Invoice:
        """Bill a set of LRs to a customer under the next invoice number"""
        invoice_number = data.invoice_number
        try:
            self._get_customer(data.customer_id)
            lorry_receipts = lifecycle.ensure_attachable(self.db, data.lorry_receipt_ids)

            invoice_number = assign_number(self.db, SEQUENCE_NAME, Invoice.invoice_number, data.invoice_number)

            invoice = Invoice(
                invoice_number=invoice_number,
                invoice_date=data.invoice_date,
                customer_id=data.customer_id,
                remarks=data.remarks,
                status=PaymentStatus.UNPAID,
                **{field: getattr(data, field) for field in GST_FIELDS}
            )
            self._set_lorry_receipts(invoice, lorry_receipts)
            self._apply_totals(invoice, lorry_receipts)

            self.db.add(invoice)
            self.db.flush()
            lifecycle.on_invoice_lr_set_changed(self.db, [], data.lorry_receipt_ids)

            self.db.commit()
            self.db.refresh(invoice)

            logger.info(
                f"Created invoice {invoice.invoice_number} for {len(lorry_receipts)} LR(s), "
                f"grand total {invoice.grand_total}"
            )
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            if "uq_invoices_invoice_number" in str(e) or "invoices.invoice_number" in str(e):
                raise DuplicateNumber("Invoice", invoice_number)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Integrity error: {str(e)}"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating invoice: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating invoice: {str(e)}"
            )

    def get_invoices(self, filters: InvoiceFilters, limit: int = 100, offset: int = 0) -> InvoiceList:
        query = self.db.query(Invoice).options(
            selectinload(Invoice.lr_links),
            selectinload(Invoice.payments)
        )

        if filters.status:
            query = query.filter(Invoice.status == filters.status)
        if filters.customer_id:
            query = query.filter(Invoice.customer_id == filters.customer_id)
        if filters.date_from:
            query = query.filter(Invoice.invoice_date >= filters.date_from)
        if filters.date_to:
            query = query.filter(Invoice.invoice_date <= filters.date_to)

        total = query.count()
        invoices = query.order_by(desc(Invoice.invoice_number)).offset(offset).limit(limit).all()
        return InvoiceList(items=invoices, total=total, limit=limit, offset=offset)

    def get_invoice_by_id(self, invoice_id: UUID) -> Invoice:
        invoice = self.db.query(Invoice).options(
            selectinload(Invoice.lr_links).selectinload(InvoiceLorryReceipt.lorry_receipt),
            selectinload(Invoice.payments)
        ).filter(Invoice.id == invoice_id).first()

        if not invoice:
            raise NotFound("Invoice not found")
        return invoice

    def update_invoice(self, invoice_id: UUID, data: InvoiceUpdate) -> Invoice:
        """
        Edit an invoice. A new LR list attaches and detaches LRs, and any
        change that moves the grand total re-derives the payment status.
        """
        invoice = self.get_invoice_by_id(invoice_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        old_grand_total = Decimal(str(invoice.grand_total))

        try:
            if "customer_id" in changes:
                self._get_customer(changes["customer_id"])

            old_lr_ids = invoice.lorry_receipt_ids
            new_lr_ids = changes.pop("lorry_receipt_ids", old_lr_ids)
            lorry_receipts = lifecycle.ensure_attachable(self.db, new_lr_ids, invoice.id)

            for field, value in changes.items():
                setattr(invoice, field, value)

            self._set_lorry_receipts(invoice, lorry_receipts)
            self._apply_totals(invoice, lorry_receipts)
            self.db.flush()
            lifecycle.on_invoice_lr_set_changed(self.db, old_lr_ids, new_lr_ids)

            self.db.commit()

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating invoice {invoice_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating invoice: {str(e)}"
            )

        if Decimal(str(invoice.grand_total)) != old_grand_total:
            logger.info(f"Invoice {invoice.invoice_number} grand total {old_grand_total} -> {invoice.grand_total}")
            reconcile_invoice(self.db, invoice.id)

        return self.get_invoice_by_id(invoice_id)

    def delete_invoice(self, invoice_id: UUID) -> Dict[str, str]:
        """Delete an invoice without payments and release its LRs"""
        invoice = self.get_invoice_by_id(invoice_id)

        if invoice.payments:
            logger.warning(f"Refused to delete invoice {invoice.invoice_number}: it has payments")
            raise InvoiceHasPayments()

        number = invoice.invoice_number
        lifecycle.on_invoice_lr_set_changed(self.db, invoice.lorry_receipt_ids, [])
        self.db.delete(invoice)
        self.db.commit()

        logger.info(f"Deleted invoice {number}")
        return {"message": f"Invoice {number} deleted"}
