from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Date, Text, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from datetime import date
from app.common.mixins import BaseMixin
import enum


class LorryReceiptStatus(enum.Enum):
    CREATED = "created"
    IN_TRANSIT = "in_transit"   # Set by hand, never derived
    DELIVERED = "delivered"
    INVOICED = "invoiced"       # Bound to an invoice
    PAID = "paid"


class GstPayableBy(enum.Enum):
    CONSIGNOR = "consignor"
    CONSIGNEE = "consignee"
    TRANSPORTER = "transporter"


class LorryReceipt(Base, BaseMixin):
    __tablename__ = "lorry_receipts"

    lr_number = Column(Integer, nullable=False)

    # Dates
    lr_date = Column(Date, nullable=False, default=date.today)
    reporting_date = Column(Date, nullable=True)
    delivery_date = Column(Date, nullable=True)

    # References
    consignor_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False)
    consignee_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicles.id"), nullable=False)

    # Route and goods
    from_place = Column(String(100), nullable=False)
    to_place = Column(String(100), nullable=False)
    packages = Column(JSON, nullable=False, default=list)
    eway_bill_no = Column(String(50), nullable=True)
    value_goods = Column(Numeric(15, 2), nullable=True)
    gst_payable_by = Column(Enum(GstPayableBy), nullable=False, default=GstPayableBy.CONSIGNOR)
    insurance = Column(JSON, nullable=True)
    invoice_no = Column(String(50), nullable=True)  # Consignor's own invoice, not ours
    seal_no = Column(String(50), nullable=True)

    # Charges
    freight = Column(Numeric(15, 2), nullable=False, default=0)
    aoc = Column(Numeric(15, 2), nullable=False, default=0)
    hamali = Column(Numeric(15, 2), nullable=False, default=0)
    b_ch = Column(Numeric(15, 2), nullable=False, default=0)
    tr_ch = Column(Numeric(15, 2), nullable=False, default=0)
    detention_ch = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    status = Column(Enum(LorryReceiptStatus), nullable=False, default=LorryReceiptStatus.CREATED)
    remarks = Column(Text, nullable=True)

    # Relationships
    consignor = relationship("Customer", foreign_keys=[consignor_id])
    consignee = relationship("Customer", foreign_keys=[consignee_id])
    vehicle = relationship("Vehicle")
    invoice_link = relationship("InvoiceLorryReceipt", back_populates="lorry_receipt", uselist=False)

    __table_args__ = (
        UniqueConstraint("lr_number", name="uq_lorry_receipts_lr_number"),
    )

    CHARGE_FIELDS = ("freight", "aoc", "hamali", "b_ch", "tr_ch", "detention_ch")

    @property
    def invoice_id(self):
        return self.invoice_link.invoice_id if self.invoice_link else None
