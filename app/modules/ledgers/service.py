"""
Ledger service

Invoices are debits at their grand total and payments received against an
invoice are credits. Truck hiring note payments go out to suppliers and are
not part of a customer's account.
"""

from decimal import Decimal
from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session, joinedload

from app.common.exceptions import NotFound
from app.modules.invoices.models import Invoice
from app.modules.lorry_receipts.service import LorryReceiptService
from app.modules.masters.models import Customer
from app.modules.payments.models import Payment
from app.modules.ledgers.schemas import (
    BalanceSide, CompanyLedger, CustomerLedger, LedgerEntry, LedgerEntryType, LedgerFilters
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _invoice_entry(invoice: Invoice) -> LedgerEntry:
    return LedgerEntry(
        entry_type=LedgerEntryType.INVOICE,
        entry_date=invoice.invoice_date,
        document_id=invoice.id,
        customer_id=invoice.customer_id,
        customer_name=invoice.customer.name,
        particulars=f"Invoice No: {invoice.invoice_number}",
        debit=Decimal(str(invoice.grand_total)),
        credit=ZERO
    )


def _payment_entry(payment: Payment) -> LedgerEntry:
    particulars = f"Payment for invoice {payment.invoice.invoice_number} via {payment.method.value}"
    if payment.reference:
        particulars += f" ({payment.reference})"
    return LedgerEntry(
        entry_type=LedgerEntryType.PAYMENT,
        entry_date=payment.payment_date,
        document_id=payment.id,
        customer_id=payment.invoice.customer_id,
        customer_name=payment.invoice.customer.name,
        particulars=particulars,
        debit=ZERO,
        credit=Decimal(str(payment.amount))
    )


def _sort_key(entry: LedgerEntry):
    # Invoices before the payments made on the same day
    return entry.entry_date, entry.entry_type != LedgerEntryType.INVOICE


def _matches(entry: LedgerEntry, filters: LedgerFilters) -> bool:
    if filters.date_from and entry.entry_date < filters.date_from:
        return False
    if filters.date_to and entry.entry_date > filters.date_to:
        return False
    if filters.entry_type and entry.entry_type != filters.entry_type:
        return False
    return True


class LedgerService:
    def __init__(self, db: Session):
        self.db = db

    def _entries(self, customer_id: UUID = None) -> List[LedgerEntry]:
        invoices = self.db.query(Invoice).options(joinedload(Invoice.customer))
        payments = self.db.query(Payment).join(Invoice, Payment.invoice_id == Invoice.id).options(
            joinedload(Payment.invoice).joinedload(Invoice.customer)
        )
        if customer_id is not None:
            invoices = invoices.filter(Invoice.customer_id == customer_id)
            payments = payments.filter(Invoice.customer_id == customer_id)

        entries = [_invoice_entry(i) for i in invoices.all()] + [_payment_entry(p) for p in payments.all()]
        return sorted(entries, key=_sort_key)

    def get_customer_ledger(self, customer_id: UUID, filters: LedgerFilters) -> CustomerLedger:
        """
        Account of one customer in date order with a running balance.

        The running balance is carried over the full history, so a filtered
        view still shows true balances. The closing balance is the balance
        after the last entry of the whole account.
        """
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise NotFound("Customer not found")

        balance = ZERO
        entries = []
        for entry in self._entries(customer_id):
            balance += entry.debit - entry.credit
            entry.balance = balance
            entries.append(entry)

        shown = [e for e in entries if _matches(e, filters)]
        return CustomerLedger(
            customer_id=customer.id,
            customer_name=customer.name,
            entries=shown,
            total_debit=sum((e.debit for e in shown), ZERO),
            total_credit=sum((e.credit for e in shown), ZERO),
            closing_balance=abs(balance),
            closing_side=BalanceSide.DEBIT if balance >= ZERO else BalanceSide.CREDIT,
            unbilled_amount=LorryReceiptService(self.db).get_outstanding_amount(customer_id)
        )

    def get_company_ledger(self, filters: LedgerFilters) -> CompanyLedger:
        """All customers' invoices and receipts, newest first"""
        shown = [e for e in self._entries() if _matches(e, filters)]
        shown.reverse()

        total_debit = sum((e.debit for e in shown), ZERO)
        total_credit = sum((e.credit for e in shown), ZERO)
        logger.debug(f"Company ledger: {len(shown)} entries, net {total_debit - total_credit}")
        return CompanyLedger(
            entries=shown,
            total_debit=total_debit,
            total_credit=total_credit,
            net_balance=total_debit - total_credit
        )
