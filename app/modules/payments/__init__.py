"""
Payments and payment-driven status.

Tables:
- payments: receipts and advances against an invoice or a truck hiring note
"""

from .models import Payment, PaymentStatus, PaymentType, PaymentMethod

__all__ = ["Payment", "PaymentStatus", "PaymentType", "PaymentMethod"]
