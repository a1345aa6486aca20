"""
Tests for lorry receipts

Covers:
- Creation with numbers from the LR range, manual numbers, duplicates
- Charge totals
- Manual status changes and invoice-driven lifecycle rules
- Deletion rules
"""

from decimal import Decimal

import pytest

from app.common.exceptions import LrAlreadyInvoiced, LrStatusConflict
from app.modules.lorry_receipts import lifecycle
from app.modules.lorry_receipts.models import LorryReceipt, LorryReceiptStatus
from app.modules.lorry_receipts.schemas import LrCharges


@pytest.fixture
def lr_payload(sample_customer, sample_consignee, sample_vehicle):
    return {
        "lr_date": "2024-05-02",
        "consignor_id": str(sample_customer.id),
        "consignee_id": str(sample_consignee.id),
        "vehicle_id": str(sample_vehicle.id),
        "from_place": "Tirupattur",
        "to_place": "Bhiwandi",
        "packages": [{
            "count": 20,
            "packing_method": "Cartons",
            "description": "Footwear",
            "actual_weight": "850",
            "charged_weight": "900"
        }],
        "charges": {"freight": "12000", "hamali": "400", "aoc": "100.50"}
    }


def make_lr(db, customer, consignee, vehicle, number, status=LorryReceiptStatus.CREATED):
    lr = LorryReceipt(
        lr_number=number,
        consignor_id=customer.id,
        consignee_id=consignee.id,
        vehicle_id=vehicle.id,
        from_place="Chennai",
        to_place="Pune",
        freight=Decimal("1000"),
        total_amount=Decimal("1000"),
        status=status
    )
    db.add(lr)
    db.commit()
    db.refresh(lr)
    return lr


class TestCharges:

    def test_total_sums_all_charges(self):
        charges = LrCharges(
            freight=Decimal("12000"), aoc=Decimal("100.50"), hamali=Decimal("400"),
            b_ch=Decimal("10"), tr_ch=Decimal("20"), detention_ch=Decimal("500")
        )
        assert charges.total == Decimal("13030.50")

    def test_negative_charge_rejected(self):
        with pytest.raises(ValueError):
            LrCharges(freight=Decimal("-1"))


class TestCreateLorryReceipt:

    def test_create_uses_legacy_counter_without_range(self, client, lr_payload):
        first = client.post("/lorry-receipts/", json=lr_payload)
        second = client.post("/lorry-receipts/", json=lr_payload)
        assert first.status_code == 201
        assert first.json()["lr_number"] == 1
        assert second.json()["lr_number"] == 2

    def test_create_computes_total_and_starts_created(self, client, lr_payload):
        data = client.post("/lorry-receipts/", json=lr_payload).json()
        assert Decimal(data["total_amount"]) == Decimal("12500.50")
        assert data["status"] == "created"
        assert data["invoice_id"] is None
        assert data["packages"][0]["count"] == 20

    def test_create_uses_configured_range(self, client, lr_payload):
        client.post("/numbering/configs", json={"document_type": "lr", "start_number": 501, "end_number": 502})
        assert client.post("/lorry-receipts/", json=lr_payload).json()["lr_number"] == 501
        assert client.post("/lorry-receipts/", json=lr_payload).json()["lr_number"] == 502

        response = client.post("/lorry-receipts/", json=lr_payload)
        assert response.status_code == 400
        assert "range exhausted" in response.json()["detail"]

    def test_manual_number_refused_when_disabled(self, client, lr_payload):
        client.post("/numbering/configs", json={"document_type": "lr", "start_number": 1, "end_number": 100})
        response = client.post("/lorry-receipts/", json={**lr_payload, "lr_number": 77})
        assert response.status_code == 400
        assert "Manual numbering is disabled" in response.json()["detail"]

    def test_duplicate_manual_number(self, client, lr_payload):
        client.post("/numbering/configs", json={
            "document_type": "lr", "start_number": 1, "end_number": 100, "allow_manual_entry": True
        })
        assert client.post("/lorry-receipts/", json={**lr_payload, "lr_number": 77}).status_code == 201

        response = client.post("/lorry-receipts/", json={**lr_payload, "lr_number": 77})
        assert response.status_code == 400
        assert "77 is already in use" in response.json()["detail"]

    def test_unknown_vehicle_404(self, client, lr_payload):
        payload = {**lr_payload, "vehicle_id": "00000000-0000-0000-0000-000000000000"}
        assert client.post("/lorry-receipts/", json=payload).status_code == 404


class TestLorryReceiptQueries:

    def test_filters(self, client, lr_payload, sample_consignee):
        client.post("/lorry-receipts/", json=lr_payload)
        client.post("/lorry-receipts/", json={**lr_payload, "lr_date": "2024-06-15"})

        response = client.get("/lorry-receipts/", params={"date_from": "2024-06-01"})
        assert response.json()["total"] == 1

        response = client.get("/lorry-receipts/", params={"customer_id": str(sample_consignee.id)})
        assert response.json()["total"] == 2

        response = client.get("/lorry-receipts/", params={"uninvoiced_only": True})
        assert response.json()["total"] == 2

    def test_update_charges_recomputes_total(self, client, lr_payload):
        lr = client.post("/lorry-receipts/", json=lr_payload).json()
        response = client.patch(f"/lorry-receipts/{lr['id']}", json={"charges": {"freight": "5000"}})
        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("5000")


class TestLorryReceiptStatus:

    def test_manual_transitions(self, client, lr_payload):
        lr = client.post("/lorry-receipts/", json=lr_payload).json()

        response = client.post(f"/lorry-receipts/{lr['id']}/status", json={"status": "in_transit"})
        assert response.json()["status"] == "in_transit"

        response = client.post(f"/lorry-receipts/{lr['id']}/status", json={
            "status": "delivered", "delivery_date": "2024-05-05"
        })
        assert response.json()["status"] == "delivered"
        assert response.json()["delivery_date"] == "2024-05-05"

    def test_invoiced_cannot_be_set_by_hand(self, client, lr_payload):
        lr = client.post("/lorry-receipts/", json=lr_payload).json()
        response = client.post(f"/lorry-receipts/{lr['id']}/status", json={"status": "invoiced"})
        assert response.status_code == 400


class TestLifecycle:
    """Tests for the invoice-driven lifecycle helpers"""

    def test_attach_and_detach(self, db_session, sample_customer, sample_consignee, sample_vehicle):
        a = make_lr(db_session, sample_customer, sample_consignee, sample_vehicle, 1)
        b = make_lr(db_session, sample_customer, sample_consignee, sample_vehicle, 2)

        lifecycle.on_invoice_lr_set_changed(db_session, [], [a.id, b.id])
        assert a.status == LorryReceiptStatus.INVOICED
        assert b.status == LorryReceiptStatus.INVOICED

        lifecycle.on_invoice_lr_set_changed(db_session, [a.id, b.id], [b.id])
        assert a.status == LorryReceiptStatus.CREATED
        assert b.status == LorryReceiptStatus.INVOICED

    def test_kept_lr_keeps_delivered_status(self, db_session, sample_customer, sample_consignee, sample_vehicle):
        lr = make_lr(db_session, sample_customer, sample_consignee, sample_vehicle, 1, LorryReceiptStatus.DELIVERED)
        lifecycle.on_invoice_lr_set_changed(db_session, [lr.id], [lr.id])
        assert lr.status == LorryReceiptStatus.DELIVERED

    def test_invoiced_lr_cannot_be_deleted(self, db_session, sample_customer, sample_consignee, sample_vehicle):
        lr = make_lr(db_session, sample_customer, sample_consignee, sample_vehicle, 1, LorryReceiptStatus.INVOICED)
        with pytest.raises(LrAlreadyInvoiced):
            lifecycle.ensure_deletable(lr)

    def test_unattached_lr_cannot_become_invoiced(self, db_session, sample_customer, sample_consignee, sample_vehicle):
        lr = make_lr(db_session, sample_customer, sample_consignee, sample_vehicle, 1)
        with pytest.raises(LrStatusConflict):
            lifecycle.ensure_manual_transition(lr, LorryReceiptStatus.INVOICED)
        lifecycle.ensure_manual_transition(lr, LorryReceiptStatus.IN_TRANSIT)


class TestDeleteLorryReceipt:

    def test_delete_created(self, client, lr_payload):
        lr = client.post("/lorry-receipts/", json=lr_payload).json()
        assert client.delete(f"/lorry-receipts/{lr['id']}").status_code == 200
        assert client.get(f"/lorry-receipts/{lr['id']}").status_code == 404

    def test_delete_invoiced_refused(self, client, lr_payload, sample_customer):
        lr = client.post("/lorry-receipts/", json=lr_payload).json()
        client.post("/invoices/", json={"customer_id": str(sample_customer.id), "lorry_receipt_ids": [lr["id"]]})

        response = client.delete(f"/lorry-receipts/{lr['id']}")
        assert response.status_code == 400
        assert "already invoiced" in response.json()["detail"]

    def test_charges_frozen_while_invoiced(self, client, lr_payload, sample_customer):
        lr = client.post("/lorry-receipts/", json=lr_payload).json()
        client.post("/invoices/", json={"customer_id": str(sample_customer.id), "lorry_receipt_ids": [lr["id"]]})

        response = client.patch(f"/lorry-receipts/{lr['id']}", json={"charges": {"freight": "1"}})
        assert response.status_code == 400
