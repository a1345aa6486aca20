"""
Domain errors for the numbering and reconciliation core.

Every error is an HTTPException carrying the status code the API returns for
it, so services can raise them at the point of failure and routers pass them
through unchanged.
"""
from fastapi import HTTPException, status


class LedgerError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Ledger operation failed"

    def __init__(self, detail: str = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class RangeExhausted(LedgerError):
    """The configured numbering range has no numbers left and overflow is off."""

    def __init__(self, sequence_name: str):
        self.sequence_name = sequence_name
        super().__init__(f"{sequence_name} range exhausted; update Settings")


class InvalidRange(LedgerError):
    default_detail = "Start number must be less than or equal to end number"


class DuplicateNumber(LedgerError):
    def __init__(self, document_type: str, number: int):
        self.document_type = document_type
        self.number = number
        super().__init__(f"{document_type} number {number} is already in use")


class ManualNumberNotAllowed(LedgerError):
    def __init__(self, document_type: str):
        super().__init__(f"Manual numbering is disabled for {document_type}; update Settings")


class InvoiceHasPayments(LedgerError):
    default_detail = "Cannot delete invoice with existing payments"


class LrAlreadyInvoiced(LedgerError):
    default_detail = "Cannot delete a lorry receipt that is already invoiced"


class LrStatusConflict(LedgerError):
    pass


class NotFound(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ThnHasPayments(LedgerError):
    default_detail = "Cannot delete truck hiring note with recorded payments"
