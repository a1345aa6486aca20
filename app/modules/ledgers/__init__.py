"""
Customer and company ledgers built from invoices (debits) and the payments
received against them (credits). Read only, no tables of its own.
"""

from .service import LedgerService

__all__ = ["LedgerService"]
