"""
Tests for truck hiring notes

Covers:
- Numbering and truck number normalisation
- Advance booked as an ADVANCE payment
- Freight edits re-deriving balance and status
- Deletion refused while payments exist
- Supplier link and filter
"""

from decimal import Decimal
from uuid import uuid4

import pytest


@pytest.fixture
def thn_payload():
    return {
        "thn_date": "2024-07-01",
        "truck_owner_name": "Sri Balaji Lorry Service",
        "truck_number": "tn45ab1234",
        "driver_name": "Suresh",
        "driver_license": "TN4520190005678",
        "origin": "Coimbatore",
        "destination": "Hosur",
        "goods_type": "Auto parts",
        "weight": "9.5",
        "freight": "5000",
        "expected_delivery_date": "2024-07-03"
    }


class TestCreateThn:

    def test_create_without_advance(self, client, thn_payload):
        response = client.post("/truck-hiring-notes/", json=thn_payload)
        assert response.status_code == 201
        data = response.json()
        assert data["thn_number"] == 1
        assert data["truck_number"] == "TN 45 AB 1234"
        assert data["status"] == "unpaid"
        assert Decimal(data["paid_amount"]) == Decimal("0")
        assert Decimal(data["balance_amount"]) == Decimal("5000")

    def test_advance_is_recorded_as_payment(self, client, thn_payload):
        data = client.post("/truck-hiring-notes/", json={**thn_payload, "advance_paid": "2000"}).json()
        assert data["status"] == "partially_paid"
        assert Decimal(data["paid_amount"]) == Decimal("2000")
        assert Decimal(data["balance_amount"]) == Decimal("3000")

        payments = client.get("/payments/", params={"truck_hiring_note_id": data["id"]}).json()
        assert payments["total"] == 1
        assert payments["items"][0]["type"] == "advance"
        assert payments["items"][0]["payment_date"] == "2024-07-01"

    def test_full_advance_is_paid(self, client, thn_payload):
        data = client.post("/truck-hiring-notes/", json={**thn_payload, "advance_paid": "5000"}).json()
        assert data["status"] == "paid"
        assert Decimal(data["balance_amount"]) == Decimal("0")

    def test_advance_above_freight_rejected(self, client, thn_payload):
        response = client.post("/truck-hiring-notes/", json={**thn_payload, "advance_paid": "6000"})
        assert response.status_code == 422

    def test_numbers_from_range(self, client, thn_payload):
        client.post("/numbering/configs", json={"document_type": "thn", "start_number": 90, "end_number": 90})
        assert client.post("/truck-hiring-notes/", json=thn_payload).json()["thn_number"] == 90
        assert client.post("/truck-hiring-notes/", json=thn_payload).status_code == 400


class TestUpdateThn:

    def test_freight_change_reconciles(self, client, thn_payload):
        thn = client.post("/truck-hiring-notes/", json={**thn_payload, "advance_paid": "2000"}).json()

        response = client.patch(f"/truck-hiring-notes/{thn['id']}", json={"freight": "2000"})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "paid"
        assert Decimal(data["balance_amount"]) == Decimal("0")

    def test_plain_edit(self, client, thn_payload):
        thn = client.post("/truck-hiring-notes/", json=thn_payload).json()
        response = client.patch(f"/truck-hiring-notes/{thn['id']}", json={"driver_name": "Anil"})
        assert response.json()["driver_name"] == "Anil"
        assert response.json()["status"] == "unpaid"


class TestDeleteThn:

    def test_delete_without_payments(self, client, thn_payload):
        thn = client.post("/truck-hiring-notes/", json=thn_payload).json()
        assert client.delete(f"/truck-hiring-notes/{thn['id']}").status_code == 200
        assert client.get(f"/truck-hiring-notes/{thn['id']}").status_code == 404

    def test_delete_with_advance_refused(self, client, thn_payload):
        thn = client.post("/truck-hiring-notes/", json={**thn_payload, "advance_paid": "100"}).json()
        response = client.delete(f"/truck-hiring-notes/{thn['id']}")
        assert response.status_code == 400
        assert "recorded payments" in response.json()["detail"]


class TestListThn:

    def test_filter_by_status_and_truck(self, client, thn_payload):
        client.post("/truck-hiring-notes/", json=thn_payload)
        client.post("/truck-hiring-notes/", json={**thn_payload, "truck_number": "KA 01 CK 4321", "advance_paid": "5000"})

        assert client.get("/truck-hiring-notes/", params={"status": "paid"}).json()["total"] == 1
        response = client.get("/truck-hiring-notes/", params={"truck_number": "TN 45"})
        assert response.json()["total"] == 1


class TestThnSupplier:

    def test_create_for_supplier_and_filter(self, client, thn_payload, sample_supplier):
        response = client.post("/truck-hiring-notes/", json={**thn_payload, "supplier_id": str(sample_supplier.id)})
        assert response.status_code == 201
        assert response.json()["supplier_id"] == str(sample_supplier.id)
        client.post("/truck-hiring-notes/", json=thn_payload)

        response = client.get("/truck-hiring-notes/", params={"supplier_id": str(sample_supplier.id)})
        assert response.json()["total"] == 1

    def test_unknown_supplier_404(self, client, thn_payload):
        response = client.post("/truck-hiring-notes/", json={**thn_payload, "supplier_id": str(uuid4())})
        assert response.status_code == 404

    def test_assign_supplier_later(self, client, thn_payload, sample_supplier):
        thn = client.post("/truck-hiring-notes/", json=thn_payload).json()
        response = client.patch(f"/truck-hiring-notes/{thn['id']}", json={"supplier_id": str(sample_supplier.id)})
        assert response.status_code == 200
        assert response.json()["supplier_id"] == str(sample_supplier.id)
