from app.database.database import Base
from sqlalchemy import Column, String, ForeignKey, Numeric, Enum, Date, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from datetime import date
from app.common.mixins import BaseMixin
import enum


class PaymentStatus(enum.Enum):
    """Settlement state of an invoice or truck hiring note"""
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


class PaymentType(enum.Enum):
    ADVANCE = "advance"
    RECEIPT = "receipt"


class PaymentMethod(enum.Enum):
    CASH = "cash"
    CHEQUE = "cheque"
    NEFT = "neft"
    RTGS = "rtgs"
    UPI = "upi"


class Payment(Base, BaseMixin):
    __tablename__ = "payments"

    amount = Column(Numeric(15, 2), nullable=False)
    payment_date = Column(Date, nullable=False, default=date.today)
    type = Column(Enum(PaymentType), nullable=False, default=PaymentType.RECEIPT)
    method = Column(Enum(PaymentMethod), nullable=False)
    reference = Column(String(100), nullable=True)  # Cheque or UTR number
    notes = Column(Text, nullable=True)

    # Target: exactly one of invoice / truck hiring note
    invoice_id = Column(UUID(as_uuid=True), ForeignKey("invoices.id"), nullable=True, index=True)
    truck_hiring_note_id = Column(UUID(as_uuid=True), ForeignKey("truck_hiring_notes.id"), nullable=True, index=True)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="payments")
    truck_hiring_note = relationship("TruckHiringNote", back_populates="payments")
    customer = relationship("Customer")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint(
            "(invoice_id IS NULL) <> (truck_hiring_note_id IS NULL)",
            name="ck_payments_single_target"
        ),
    )
