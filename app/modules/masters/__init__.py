"""
Master data referenced by the transport documents: customers (consignors,
consignees, billed parties), vehicles and the suppliers whose trucks are hired.
"""

from .models import Customer, Supplier, Vehicle
from .service import CustomerService, SupplierService, VehicleService

__all__ = ["Customer", "Supplier", "Vehicle", "CustomerService", "SupplierService", "VehicleService"]
