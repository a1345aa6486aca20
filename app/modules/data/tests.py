"""
Tests for reset, backup, restore and demo data
"""

from decimal import Decimal

import pytest


@pytest.fixture
def populated(client, sample_customer, sample_consignee, sample_vehicle):
    """A numbered LR on a part-paid invoice plus a THN with an advance"""
    client.post("/numbering/configs", json={"document_type": "lr", "prefix": "LR", "start_number": 10, "end_number": 99})
    lr = client.post("/lorry-receipts/", json={
        "consignor_id": str(sample_customer.id),
        "consignee_id": str(sample_consignee.id),
        "vehicle_id": str(sample_vehicle.id),
        "from_place": "Chennai",
        "to_place": "Mumbai",
        "charges": {"freight": "1000.50"},
        "insurance": {"has_insured": True, "company": "New India", "policy_date": "2024-01-01"}
    }).json()
    invoice = client.post("/invoices/", json={
        "customer_id": str(sample_customer.id), "lorry_receipt_ids": [lr["id"]]
    }).json()
    client.post("/payments/", json={"amount": "100", "method": "upi", "invoice_id": invoice["id"]})
    thn = client.post("/truck-hiring-notes/", json={
        "truck_owner_name": "KPN Carriers", "truck_number": "TN 01 AB 1111", "driver_name": "Karthik",
        "driver_license": "TN0120190001111", "origin": "Chennai", "destination": "Pune",
        "goods_type": "Steel coils", "weight": "20", "freight": "8000", "advance_paid": "3000"
    }).json()
    return {"lr": lr, "invoice": invoice, "thn": thn}


class TestReset:

    def test_reset_clears_everything(self, client, populated):
        response = client.post("/data/reset")
        assert response.status_code == 200
        assert response.json()["counts"]["payments"] == 2

        assert client.get("/customers/").json()["total"] == 0
        assert client.get("/lorry-receipts/").json()["total"] == 0
        assert client.get("/numbering/configs").json() == []

    def test_counters_restart_after_reset(self, client, populated):
        client.post("/data/reset")
        assert client.get("/numbering/peek/thn").json()["number"] == 1


class TestBackupRestore:

    def test_backup_contains_all_tables(self, client, populated):
        backup = client.get("/data/backup").json()
        tables = backup["tables"]
        assert backup["version"] == 1
        assert len(tables["lorry_receipts"]) == 1
        assert len(tables["invoice_lorry_receipts"]) == 1
        assert len(tables["payments"]) == 2
        assert sorted(r["name"] for r in tables["sequence_counters"]) == ["invoice", "thn"]

    def test_restore_replaces_state(self, client, populated):
        backup = client.get("/data/backup").json()
        client.post("/data/load-mock")
        assert client.get("/customers/").json()["total"] == 3

        response = client.post("/data/restore", json=backup)
        assert response.status_code == 200
        assert response.json()["counts"]["customers"] == 2

        invoice = client.get(f"/invoices/{populated['invoice']['id']}").json()
        assert invoice["status"] == "partially_paid"
        assert invoice["lorry_receipt_ids"] == [populated["lr"]["id"]]

        lr = client.get(f"/lorry-receipts/{populated['lr']['id']}").json()
        assert lr["status"] == "invoiced"
        assert Decimal(lr["total_amount"]) == Decimal("1000.50")
        assert lr["insurance"]["company"] == "New India"

        thn = client.get(f"/truck-hiring-notes/{populated['thn']['id']}").json()
        assert Decimal(thn["balance_amount"]) == Decimal("5000")

        # Numbering continues where the backup left off
        assert client.get("/numbering/peek/lr").json()["number"] == 11

    def test_restore_rejects_unknown_table(self, client):
        response = client.post("/data/restore", json={"version": 1, "tables": {"widgets": []}})
        assert response.status_code == 400

    def test_restore_rejects_bad_values(self, client):
        response = client.post("/data/restore", json={
            "version": 1, "tables": {"vehicles": [{"id": "not-a-uuid", "number": "TN 01 A 1"}]}
        })
        assert response.status_code == 400


class TestLoadMock:

    def test_load_mock(self, client, populated):
        response = client.post("/data/load-mock")
        assert response.status_code == 200
        assert client.get("/customers/").json()["total"] == 3
        assert len(client.get("/vehicles/").json()) == 3
        assert client.get("/invoices/").json()["total"] == 0
