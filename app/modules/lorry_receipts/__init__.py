"""
Lorry receipts (consignment notes).

Tables:
- lorry_receipts: one row per consignment, numbered from the LR range
"""

from .models import LorryReceipt, LorryReceiptStatus, GstPayableBy

__all__ = ["LorryReceipt", "LorryReceiptStatus", "GstPayableBy"]
