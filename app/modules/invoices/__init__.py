"""
Invoices billing lorry receipts to a customer.

Tables:
- invoices: numbered from the invoice range, status derived from payments
- invoice_lorry_receipts: ordered LR membership, one invoice per LR
"""

from .models import Invoice, InvoiceLorryReceipt, GstType

__all__ = ["Invoice", "InvoiceLorryReceipt", "GstType"]
