from fastapi import APIRouter, Query, status
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.dependencies.dbDependecies import db_dependency
from app.modules.masters.service import CustomerService, SupplierService, VehicleService
from app.modules.masters.schemas import (
    CustomerCreate, CustomerUpdate, CustomerOut, CustomerList,
    SupplierCreate, SupplierUpdate, SupplierOut, VehicleCreate, VehicleOut
)

customers_router = APIRouter(prefix="/customers", tags=["Customers"])
vehicles_router = APIRouter(prefix="/vehicles", tags=["Vehicles"])
suppliers_router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


@customers_router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, db: db_dependency):
    return CustomerService(db).create_customer(data)


@customers_router.get("/", response_model=CustomerList)
def list_customers(
    db: db_dependency,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None, description="Name, trade name or GSTIN")
):
    return CustomerService(db).get_customers(limit, offset, search)


@customers_router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: UUID, db: db_dependency):
    return CustomerService(db).get_customer_by_id(customer_id)


@customers_router.patch("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: UUID, data: CustomerUpdate, db: db_dependency):
    return CustomerService(db).update_customer(customer_id, data)


@customers_router.delete("/{customer_id}")
def delete_customer(customer_id: UUID, db: db_dependency):
    return CustomerService(db).delete_customer(customer_id)


@vehicles_router.post("/", response_model=VehicleOut, status_code=status.HTTP_201_CREATED)
def create_vehicle(data: VehicleCreate, db: db_dependency):
    return VehicleService(db).create_vehicle(data)


@vehicles_router.get("/", response_model=List[VehicleOut])
def list_vehicles(db: db_dependency):
    return VehicleService(db).get_vehicles()


@vehicles_router.get("/{vehicle_id}", response_model=VehicleOut)
def get_vehicle(vehicle_id: UUID, db: db_dependency):
    return VehicleService(db).get_vehicle_by_id(vehicle_id)


@vehicles_router.delete("/{vehicle_id}")
def delete_vehicle(vehicle_id: UUID, db: db_dependency):
    return VehicleService(db).delete_vehicle(vehicle_id)


@suppliers_router.post("/", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(data: SupplierCreate, db: db_dependency):
    return SupplierService(db).create_supplier(data)


@suppliers_router.get("/", response_model=List[SupplierOut])
def list_suppliers(db: db_dependency, search: Optional[str] = Query(None)):
    return SupplierService(db).get_suppliers(search)


@suppliers_router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: UUID, db: db_dependency):
    return SupplierService(db).get_supplier_by_id(supplier_id)


@suppliers_router.patch("/{supplier_id}", response_model=SupplierOut)
def update_supplier(supplier_id: UUID, data: SupplierUpdate, db: db_dependency):
    return SupplierService(db).update_supplier(supplier_id, data)


@suppliers_router.delete("/{supplier_id}")
def delete_supplier(supplier_id: UUID, db: db_dependency):
    """Delete a supplier. Refused while truck hiring notes reference it."""
    return SupplierService(db).delete_supplier(supplier_id)
