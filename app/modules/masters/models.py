from app.database.database import Base
from sqlalchemy import Column, String, Text, UniqueConstraint
from app.common.mixins import BaseMixin


class Customer(Base, BaseMixin):
    """Consignors, consignees and billed parties"""
    __tablename__ = "customers"

    name = Column(String(200), nullable=False)  # Legal name of business
    trade_name = Column(String(200), nullable=True)
    address = Column(Text, nullable=False, default="")
    state = Column(String(100), nullable=False, default="")
    gstin = Column(String(15), nullable=True)
    contact_person = Column(String(100), nullable=True)
    contact_phone = Column(String(20), nullable=True)
    contact_email = Column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("gstin", name="uq_customers_gstin"),
    )


class Vehicle(Base, BaseMixin):
    __tablename__ = "vehicles"

    number = Column(String(20), nullable=False)  # Stored as 'TN 20 AX 1234'

    __table_args__ = (
        UniqueConstraint("number", name="uq_vehicles_number"),
    )


class Supplier(Base, BaseMixin):
    """Truck owners and fleet operators whose trucks are hired"""
    __tablename__ = "suppliers"

    name = Column(String(200), nullable=False)
    contact_person = Column(String(100), nullable=True)
    contact_phone = Column(String(20), nullable=True)
    contact_email = Column(String(100), nullable=True)
    payment_terms = Column(String(100), nullable=True)  # e.g. 'Balance on delivery'
    notes = Column(Text, nullable=True)
