"""
Seed script: populate the ledger with a realistic demo data set.

What it creates:
- Numbering ranges for LR, invoice and THN.
- Demo customers and vehicles (the same set as POST /data/load-mock).
- Suppliers for the hired trucks.
- Lorry receipts between random customers.
- Invoices billing groups of those LRs, some partly or fully paid.
- Truck hiring notes, some with an advance.

Run inside the API container so the database host resolves:
    docker compose exec api python scripts/seed_demo_data.py --lrs 60 --thns 15

Note: This is intended for development environments only.
"""

# Add project root to sys.path so `app.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import random
from datetime import date, timedelta
from decimal import Decimal

from fastapi import HTTPException

from app.database.database import SessionLocal, Base, engine
from app.modules.data.seed_data import MOCK_CUSTOMERS, MOCK_VEHICLES
from app.modules.masters.models import Customer, Supplier, Vehicle
from app.modules.numbering.schemas import DocumentType, NumberingRangeUpsert
from app.modules.numbering.service import NumberingService
from app.modules.lorry_receipts.schemas import LorryReceiptCreate, LrCharges, PackageItem
from app.modules.lorry_receipts.service import LorryReceiptService
from app.modules.invoices.schemas import InvoiceCreate
from app.modules.invoices.service import InvoiceService
from app.modules.payments.models import PaymentMethod
from app.modules.payments.schemas import PaymentCreate
from app.modules.payments.service import PaymentService
from app.modules.truck_hiring_notes.schemas import TruckHiringNoteCreate
from app.modules.truck_hiring_notes.service import TruckHiringNoteService

PLACES = ["Chennai", "Tirupattur", "Bhiwandi", "Mumbai", "Bengaluru", "Hosur", "Coimbatore", "Pune"]
GOODS = ["Textiles", "Auto parts", "Cement bags", "FMCG cartons", "Steel coils"]
OWNERS = ["Murugan Transports", "Sri Balaji Lorry Service", "Patel Roadlines", "KPN Carriers"]


def pick(seq):
    return random.choice(seq)


def create_ranges(db):
    service = NumberingService(db)
    for document_type, prefix in ((DocumentType.LR, "LR"), (DocumentType.INVOICE, "INV"), (DocumentType.THN, "THN")):
        service.upsert_range(NumberingRangeUpsert(
            document_type=document_type,
            prefix=prefix,
            start_number=1,
            end_number=999999,
            allow_manual_entry=True,
            allow_outside_range=False
        ))


def create_masters(db):
    for data in MOCK_CUSTOMERS:
        if not db.query(Customer).filter(Customer.gstin == data["gstin"]).first():
            db.add(Customer(**data))
    for data in MOCK_VEHICLES:
        if not db.query(Vehicle).filter(Vehicle.number == data["number"]).first():
            db.add(Vehicle(**data))
    for name in OWNERS:
        if not db.query(Supplier).filter(Supplier.name == name).first():
            db.add(Supplier(name=name, payment_terms="Balance on delivery"))
    db.commit()
    return db.query(Customer).all(), db.query(Vehicle).all()


def create_lorry_receipts(db, customers, vehicles, count):
    service = LorryReceiptService(db)
    created = []
    for _ in range(count):
        consignor, consignee = random.sample(customers, 2)
        origin, destination = random.sample(PLACES, 2)
        weight = Decimal(random.randint(500, 9000))
        data = LorryReceiptCreate(
            lr_date=date.today() - timedelta(days=random.randint(0, 60)),
            consignor_id=consignor.id,
            consignee_id=consignee.id,
            vehicle_id=pick(vehicles).id,
            from_place=origin,
            to_place=destination,
            packages=[PackageItem(
                count=random.randint(1, 40),
                packing_method=pick(["Bags", "Cartons", "Bundles"]),
                description=pick(GOODS),
                actual_weight=weight,
                charged_weight=weight
            )],
            charges=LrCharges(
                freight=Decimal(random.randint(8, 60) * 500),
                hamali=Decimal(random.choice([0, 250, 500])),
                aoc=Decimal(random.choice([0, 100]))
            )
        )
        try:
            created.append(service.create_lorry_receipt(data))
        except HTTPException as e:
            print(f"  Skipped LR: {e.detail}")
    return created


def create_invoices(db, lorry_receipts):
    """Bill LRs in small batches per consignor and pay some of them"""
    invoice_service = InvoiceService(db)
    payment_service = PaymentService(db)
    by_customer = {}
    for lr in lorry_receipts:
        by_customer.setdefault(lr.consignor_id, []).append(lr)

    created = 0
    for customer_id, lrs in by_customer.items():
        for i in range(0, len(lrs), 3):
            batch = lrs[i:i + 3]
            try:
                invoice = invoice_service.create_invoice(InvoiceCreate(
                    customer_id=customer_id,
                    lorry_receipt_ids=[lr.id for lr in batch]
                ))
                roll = random.random()
                if roll < 0.6:
                    amount = invoice.grand_total if roll < 0.3 else (invoice.grand_total / 2).quantize(Decimal("0.01"))
                    payment_service.create_payment(PaymentCreate(
                        amount=amount,
                        method=pick(list(PaymentMethod)),
                        reference=f"PAY-{invoice.invoice_number:05d}",
                        invoice_id=invoice.id
                    ))
                created += 1
            except HTTPException as e:
                print(f"  Skipped invoice: {e.detail}")
    return created


def create_truck_hiring_notes(db, count):
    service = TruckHiringNoteService(db)
    suppliers = db.query(Supplier).all()
    created = 0
    for _ in range(count):
        origin, destination = random.sample(PLACES, 2)
        freight = Decimal(random.randint(10, 80) * 1000)
        advance = random.choice([Decimal("0"), (freight * Decimal("0.3")).quantize(Decimal("1"))])
        supplier = pick(suppliers)
        data = TruckHiringNoteCreate(
            supplier_id=supplier.id,
            truck_owner_name=supplier.name,
            truck_number=f"TN {random.randint(10, 99)} {pick(['AB', 'CK', 'BX'])} {random.randint(1000, 9999)}",
            driver_name=pick(["Ravi", "Suresh", "Anil", "Karthik"]),
            driver_license=f"TN{random.randint(10, 99)}2019{random.randint(1000000, 9999999)}",
            origin=origin,
            destination=destination,
            goods_type=pick(GOODS),
            weight=Decimal(random.randint(5, 25)),
            freight=freight,
            advance_paid=advance,
            expected_delivery_date=date.today() + timedelta(days=random.randint(1, 7))
        )
        try:
            service.create_truck_hiring_note(data)
            created += 1
        except HTTPException as e:
            print(f"  Skipped THN: {e.detail}")
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed transport ledger demo data")
    parser.add_argument("--lrs", type=int, default=60)
    parser.add_argument("--thns", type=int, default=15)
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        print("Configuring numbering ranges...")
        create_ranges(db)

        customers, vehicles = create_masters(db)
        print(f"Customers: {len(customers)}, Vehicles: {len(vehicles)}")

        print("Creating lorry receipts...")
        lorry_receipts = create_lorry_receipts(db, customers, vehicles, args.lrs)
        print(f"Lorry receipts created: {len(lorry_receipts)}")

        print("Creating invoices and payments...")
        print(f"Invoices created: {create_invoices(db, lorry_receipts)}")

        print("Creating truck hiring notes...")
        print(f"Truck hiring notes created: {create_truck_hiring_notes(db, args.thns)}")

        print("\nSeed completed.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
