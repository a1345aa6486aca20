from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from datetime import date
from app.common.mixins import BaseMixin
from app.modules.payments.models import PaymentStatus


class TruckHiringNote(Base, BaseMixin):
    __tablename__ = "truck_hiring_notes"

    thn_number = Column(Integer, nullable=False)
    thn_date = Column(Date, nullable=False, default=date.today)

    # Hired truck. The supplier is optional for one-off owners
    supplier_id = Column(UUID(as_uuid=True), ForeignKey("suppliers.id"), nullable=True)
    truck_owner_name = Column(String(150), nullable=False)
    truck_number = Column(String(20), nullable=False)
    driver_name = Column(String(100), nullable=False)
    driver_license = Column(String(50), nullable=False)

    # Trip
    origin = Column(String(100), nullable=False)
    destination = Column(String(100), nullable=False)
    goods_type = Column(String(100), nullable=False)
    weight = Column(Numeric(12, 3), nullable=False)
    expected_delivery_date = Column(Date, nullable=True)
    special_instructions = Column(Text, nullable=True)

    # Money. paid_amount and balance_amount are kept in step with payments
    freight = Column(Numeric(15, 2), nullable=False)
    advance_paid = Column(Numeric(15, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(15, 2), nullable=False, default=0)
    balance_amount = Column(Numeric(15, 2), nullable=False, default=0)  # May go negative on overpayment
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID)

    supplier = relationship("Supplier")
    payments = relationship("Payment", back_populates="truck_hiring_note")

    __table_args__ = (
        UniqueConstraint("thn_number", name="uq_truck_hiring_notes_thn_number"),
    )
