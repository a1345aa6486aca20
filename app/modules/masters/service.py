from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import List, Optional, Dict
from uuid import UUID
import logging

from app.common.exceptions import NotFound
from app.modules.invoices.models import Invoice
from app.modules.lorry_receipts.models import LorryReceipt
from app.modules.masters.models import Customer, Supplier, Vehicle
from app.modules.masters.schemas import (
    CustomerCreate, CustomerUpdate, CustomerList, SupplierCreate, SupplierUpdate, VehicleCreate
)
from app.modules.payments.models import Payment
from app.modules.truck_hiring_notes.models import TruckHiringNote

logger = logging.getLogger(__name__)


class CustomerService:
    def __init__(self, db: Session):
        self.db = db

    def create_customer(self, data: CustomerCreate) -> Customer:
        try:
            customer = Customer(**data.model_dump())
            self.db.add(customer)
            self.db.commit()
            self.db.refresh(customer)
            logger.info(f"Created customer {customer.name}")
            return customer
        except IntegrityError as e:
            self.db.rollback()
            if "uq_customers_gstin" in str(e) or "customers.gstin" in str(e):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"A customer with GSTIN {data.gstin} already exists"
                )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Integrity error: {str(e)}"
            )

    def get_customers(self, limit: int = 100, offset: int = 0, search: Optional[str] = None) -> CustomerList:
        query = self.db.query(Customer)
        if search:
            term = f"%{search}%"
            query = query.filter(or_(
                Customer.name.ilike(term),
                Customer.trade_name.ilike(term),
                Customer.gstin.ilike(term)
            ))

        total = query.count()
        customers = query.order_by(Customer.name).offset(offset).limit(limit).all()
        return CustomerList(items=customers, total=total, limit=limit, offset=offset)

    def get_customer_by_id(self, customer_id: UUID) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise NotFound("Customer not found")
        return customer

    def _customer_in_use(self, customer_id: UUID) -> bool:
        lr_ref = self.db.query(LorryReceipt.id).filter(or_(
            LorryReceipt.consignor_id == customer_id,
            LorryReceipt.consignee_id == customer_id
        )).first()
        invoice_ref = self.db.query(Invoice.id).filter(Invoice.customer_id == customer_id).first()
        payment_ref = self.db.query(Payment.id).filter(Payment.customer_id == customer_id).first()
        return any((lr_ref, invoice_ref, payment_ref))

    def update_customer(self, customer_id: UUID, data: CustomerUpdate) -> Customer:
        customer = self.get_customer_by_id(customer_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(customer, field, value)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A customer with GSTIN {data.gstin} already exists"
            )
        self.db.refresh(customer)
        return customer

    def delete_customer(self, customer_id: UUID) -> Dict[str, str]:
        customer = self.get_customer_by_id(customer_id)
        if self._customer_in_use(customer_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a customer referenced by lorry receipts, invoices or payments"
            )
        try:
            self.db.delete(customer)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a customer referenced by lorry receipts, invoices or payments"
            )
        logger.info(f"Deleted customer {customer_id}")
        return {"message": "Customer deleted"}


class VehicleService:
    def __init__(self, db: Session):
        self.db = db

    def create_vehicle(self, data: VehicleCreate) -> Vehicle:
        try:
            vehicle = Vehicle(number=data.number)
            self.db.add(vehicle)
            self.db.commit()
            self.db.refresh(vehicle)
            return vehicle
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Vehicle {data.number} already exists"
            )

    def get_vehicles(self) -> List[Vehicle]:
        return self.db.query(Vehicle).order_by(Vehicle.number).all()

    def get_vehicle_by_id(self, vehicle_id: UUID) -> Vehicle:
        vehicle = self.db.get(Vehicle, vehicle_id)
        if not vehicle:
            raise NotFound("Vehicle not found")
        return vehicle

    def delete_vehicle(self, vehicle_id: UUID) -> Dict[str, str]:
        vehicle = self.get_vehicle_by_id(vehicle_id)
        if self.db.query(LorryReceipt.id).filter(LorryReceipt.vehicle_id == vehicle_id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a vehicle referenced by lorry receipts"
            )
        try:
            self.db.delete(vehicle)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a vehicle referenced by lorry receipts"
            )
        return {"message": "Vehicle deleted"}


class SupplierService:
    def __init__(self, db: Session):
        self.db = db

    def create_supplier(self, data: SupplierCreate) -> Supplier:
        supplier = Supplier(**data.model_dump())
        self.db.add(supplier)
        self.db.commit()
        self.db.refresh(supplier)
        logger.info(f"Created supplier {supplier.name}")
        return supplier

    def get_suppliers(self, search: Optional[str] = None) -> List[Supplier]:
        query = self.db.query(Supplier)
        if search:
            query = query.filter(Supplier.name.ilike(f"%{search}%"))
        return query.order_by(Supplier.name).all()

    def get_supplier_by_id(self, supplier_id: UUID) -> Supplier:
        supplier = self.db.get(Supplier, supplier_id)
        if not supplier:
            raise NotFound("Supplier not found")
        return supplier

    def update_supplier(self, supplier_id: UUID, data: SupplierUpdate) -> Supplier:
        supplier = self.get_supplier_by_id(supplier_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(supplier, field, value)
        self.db.commit()
        self.db.refresh(supplier)
        return supplier

    def delete_supplier(self, supplier_id: UUID) -> Dict[str, str]:
        supplier = self.get_supplier_by_id(supplier_id)
        if self.db.query(TruckHiringNote.id).filter(TruckHiringNote.supplier_id == supplier_id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a supplier referenced by truck hiring notes"
            )
        self.db.delete(supplier)
        self.db.commit()
        logger.info(f"Deleted supplier {supplier_id}")
        return {"message": "Supplier deleted"}
