from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.dialects.postgresql import UUID
from datetime import date
from decimal import Decimal
from app.common.mixins import BaseMixin
from app.modules.payments.models import PaymentStatus
import enum


class GstType(enum.Enum):
    CGST_SGST = "cgst_sgst"  # Intra-state
    IGST = "igst"            # Inter-state


class InvoiceLorryReceipt(Base):
    """LRs billed on an invoice, in print order. An LR appears on at most one invoice."""
    __tablename__ = "invoice_lorry_receipts"

    invoice_id = Column(UUID(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), primary_key=True)
    lorry_receipt_id = Column(UUID(as_uuid=True), ForeignKey("lorry_receipts.id"), primary_key=True, unique=True)
    position = Column(Integer, nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="lr_links")
    lorry_receipt = relationship("LorryReceipt", back_populates="invoice_link")


class Invoice(Base, BaseMixin):
    __tablename__ = "invoices"

    invoice_number = Column(Integer, nullable=False)
    invoice_date = Column(Date, nullable=False, default=date.today)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False)
    remarks = Column(Text, nullable=True)

    # Totals. total_amount is the taxable amount (sum of LR totals)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    gst_type = Column(Enum(GstType), nullable=False, default=GstType.CGST_SGST)
    cgst_rate = Column(Numeric(5, 2), nullable=False, default=0)
    sgst_rate = Column(Numeric(5, 2), nullable=False, default=0)
    igst_rate = Column(Numeric(5, 2), nullable=False, default=0)
    cgst_amount = Column(Numeric(15, 2), nullable=False, default=0)
    sgst_amount = Column(Numeric(15, 2), nullable=False, default=0)
    igst_amount = Column(Numeric(15, 2), nullable=False, default=0)
    grand_total = Column(Numeric(15, 2), nullable=False, default=0)
    is_rcm = Column(Boolean, nullable=False, default=False)  # Reverse charge: GST not added to grand total
    is_manual_gst = Column(Boolean, nullable=False, default=False)

    # Derived from payments, never set directly
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID)

    # Relationships
    customer = relationship("Customer")
    lr_links = relationship(
        "InvoiceLorryReceipt",
        back_populates="invoice",
        order_by=InvoiceLorryReceipt.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    lorry_receipts = association_proxy(
        "lr_links", "lorry_receipt", creator=lambda lr: InvoiceLorryReceipt(lorry_receipt=lr)
    )
    payments = relationship("Payment", back_populates="invoice")

    __table_args__ = (
        UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
    )

    @property
    def lorry_receipt_ids(self):
        return [link.lorry_receipt_id for link in self.lr_links]

    @property
    def paid_amount(self):
        return sum((Decimal(str(p.amount)) for p in self.payments), Decimal("0"))

    @property
    def balance_due(self):
        return Decimal(str(self.grand_total)) - self.paid_amount
