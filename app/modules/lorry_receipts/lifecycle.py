"""
Lorry receipt status changes driven by invoice membership.

CREATED -> INVOICED when an LR is bound to an invoice, back to CREATED when it
is removed from it (including invoice deletion). DELIVERED and PAID may be set
by hand while the LR stays on its invoice. IN_TRANSIT is manual only.
"""
import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.common.exceptions import LrAlreadyInvoiced, LrStatusConflict, NotFound
from app.modules.lorry_receipts.models import LorryReceipt, LorryReceiptStatus

logger = logging.getLogger(__name__)

# Statuses an LR may hold while it belongs to an invoice
ATTACHED_STATUSES = {
    LorryReceiptStatus.INVOICED,
    LorryReceiptStatus.DELIVERED,
    LorryReceiptStatus.PAID,
}


def _load(db: Session, lr_ids: Iterable[UUID]) -> List[LorryReceipt]:
    lr_ids = list(lr_ids)
    if not lr_ids:
        return []
    return db.query(LorryReceipt).filter(LorryReceipt.id.in_(lr_ids)).all()


def on_invoice_lr_set_changed(
    db: Session,
    old_lr_ids: Iterable[UUID],
    new_lr_ids: Iterable[UUID],
    detach_status: LorryReceiptStatus = LorryReceiptStatus.CREATED
) -> None:
    """
    Move newly attached LRs to INVOICED and detached ones to ``detach_status``.
    Changes are left in the session for the caller to commit.
    """
    old_ids, new_ids = set(old_lr_ids), set(new_lr_ids)

    for lr in _load(db, new_ids - old_ids):
        if lr.status != LorryReceiptStatus.INVOICED:
            logger.info(f"LR {lr.lr_number}: {lr.status.value} -> invoiced")
            lr.status = LorryReceiptStatus.INVOICED

    for lr in _load(db, old_ids - new_ids):
        if lr.status != detach_status:
            logger.info(f"LR {lr.lr_number}: {lr.status.value} -> {detach_status.value} (removed from invoice)")
            lr.status = detach_status


def ensure_attachable(db: Session, lr_ids: List[UUID], invoice_id: Optional[UUID] = None) -> List[LorryReceipt]:
    """
    Load the LRs for an invoice, in the order given.
    Fails when one is missing or already belongs to another invoice.
    """
    found = {lr.id: lr for lr in _load(db, lr_ids)}
    missing = [str(lr_id) for lr_id in lr_ids if lr_id not in found]
    if missing:
        raise NotFound(f"Lorry receipt(s) not found: {', '.join(missing)}")

    for lr_id in lr_ids:
        lr = found[lr_id]
        link = lr.invoice_link
        if link is not None and link.invoice_id != invoice_id:
            raise LrAlreadyInvoiced(
                f"Lorry receipt {lr.lr_number} is already on invoice {link.invoice.invoice_number}"
            )

    return [found[lr_id] for lr_id in lr_ids]


def ensure_deletable(lr: LorryReceipt) -> None:
    if lr.status == LorryReceiptStatus.INVOICED or lr.invoice_link is not None:
        logger.warning(f"Refused to delete invoiced LR {lr.lr_number}")
        raise LrAlreadyInvoiced(
            f"Cannot delete lorry receipt {lr.lr_number}: it is already invoiced"
        )


def ensure_manual_transition(lr: LorryReceipt, new_status: LorryReceiptStatus) -> None:
    """Validate a status change requested by a user rather than by an invoice"""
    if lr.invoice_link is not None:
        if new_status not in ATTACHED_STATUSES:
            raise LrStatusConflict(
                f"Lorry receipt {lr.lr_number} is on invoice "
                f"{lr.invoice_link.invoice.invoice_number}; remove it from the invoice first"
            )
    elif new_status == LorryReceiptStatus.INVOICED:
        raise LrStatusConflict(
            f"Lorry receipt {lr.lr_number} becomes invoiced by adding it to an invoice"
        )


def mark_paid(db: Session, lr_ids: Iterable[UUID]) -> None:
    for lr in _load(db, lr_ids):
        if lr.status != LorryReceiptStatus.PAID:
            logger.info(f"LR {lr.lr_number}: {lr.status.value} -> paid (invoice settled)")
            lr.status = LorryReceiptStatus.PAID


def unmark_paid(db: Session, lr_ids: Iterable[UUID]) -> None:
    for lr in _load(db, lr_ids):
        if lr.status == LorryReceiptStatus.PAID:
            logger.info(f"LR {lr.lr_number}: paid -> invoiced (invoice no longer settled)")
            lr.status = LorryReceiptStatus.INVOICED
