"""
Tests for payments and payment-driven status

Covers:
- classify_payment_status boundaries
- Invoice and THN reconciliation on payment create, update and delete
- Retargeting a payment reconciles both documents
- Reconciliation is idempotent and tolerates missing targets
- LR -> PAID when the invoice is settled, behind LR_PAID_ON_INVOICE_PAID
"""

from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from app.core.config import settings
from app.modules.invoices.models import Invoice
from app.modules.payments.models import PaymentStatus
from app.modules.payments.reconciliation import classify_payment_status, reconcile_invoice, reconcile_thn


@pytest.fixture
def invoice(client, sample_customer, sample_consignee, sample_vehicle):
    """Reverse-charge invoice over one LR, so grand total equals freight (1000)"""
    lr = client.post("/lorry-receipts/", json={
        "consignor_id": str(sample_customer.id),
        "consignee_id": str(sample_consignee.id),
        "vehicle_id": str(sample_vehicle.id),
        "from_place": "Hosur",
        "to_place": "Pune",
        "charges": {"freight": "1000"}
    }).json()
    response = client.post("/invoices/", json={
        "customer_id": str(sample_customer.id),
        "lorry_receipt_ids": [lr["id"]],
        "is_rcm": True
    })
    assert Decimal(response.json()["grand_total"]) == Decimal("1000")
    return response.json()


@pytest.fixture
def thn(client):
    response = client.post("/truck-hiring-notes/", json={
        "truck_owner_name": "Murugan Transports",
        "truck_number": "TN 45 AB 1234",
        "driver_name": "Ravi",
        "driver_license": "TN4520190001234",
        "origin": "Chennai",
        "destination": "Bengaluru",
        "goods_type": "Textiles",
        "weight": "12",
        "freight": "5000"
    })
    assert response.status_code == 201
    return response.json()


def pay(client, amount, **target):
    response = client.post("/payments/", json={"amount": amount, "method": "cash", **target})
    assert response.status_code == 201
    return response.json()


def invoice_status(client, invoice_id):
    return client.get(f"/invoices/{invoice_id}").json()["status"]


class TestClassifyPaymentStatus:

    @pytest.mark.parametrize("paid, target, expected", [
        ("0", "1000", PaymentStatus.UNPAID),
        ("0.01", "1000", PaymentStatus.PARTIALLY_PAID),
        ("999.99", "1000", PaymentStatus.PARTIALLY_PAID),
        ("1000", "1000", PaymentStatus.PAID),
        ("1500", "1000", PaymentStatus.PAID),
        ("0", "0", PaymentStatus.UNPAID),
    ])
    def test_boundaries(self, paid, target, expected):
        assert classify_payment_status(Decimal(paid), Decimal(target)) == expected


class TestInvoicePayments:

    def test_partial_then_paid_then_partial(self, client, invoice):
        pay(client, "400", invoice_id=invoice["id"])
        assert invoice_status(client, invoice["id"]) == "partially_paid"

        second = pay(client, "600", invoice_id=invoice["id"])
        assert invoice_status(client, invoice["id"]) == "paid"

        client.delete(f"/payments/{second['id']}")
        assert invoice_status(client, invoice["id"]) == "partially_paid"

    def test_overpayment_accepted(self, client, invoice):
        pay(client, "1500", invoice_id=invoice["id"])
        data = client.get(f"/invoices/{invoice['id']}").json()
        assert data["status"] == "paid"
        assert Decimal(data["balance_due"]) == Decimal("-500")

    def test_update_amount_reconciles(self, client, invoice):
        payment = pay(client, "1000", invoice_id=invoice["id"])
        client.patch(f"/payments/{payment['id']}", json={"amount": "250"})
        assert invoice_status(client, invoice["id"]) == "partially_paid"

    def test_payment_defaults_customer_from_invoice(self, client, invoice, sample_customer):
        payment = pay(client, "10", invoice_id=invoice["id"])
        assert payment["customer_id"] == str(sample_customer.id)

    def test_lrs_untouched_by_default(self, client, invoice):
        pay(client, "1000", invoice_id=invoice["id"])
        lr_id = invoice["lorry_receipt_ids"][0]
        assert client.get(f"/lorry-receipts/{lr_id}").json()["status"] == "invoiced"

    def test_lrs_marked_paid_when_enabled(self, client, invoice, monkeypatch):
        monkeypatch.setattr(settings, "LR_PAID_ON_INVOICE_PAID", True)
        pay(client, "1000", invoice_id=invoice["id"])
        lr_id = invoice["lorry_receipt_ids"][0]
        assert client.get(f"/lorry-receipts/{lr_id}").json()["status"] == "paid"

    def test_lrs_return_to_invoiced_when_invoice_unsettled(self, client, invoice, monkeypatch):
        monkeypatch.setattr(settings, "LR_PAID_ON_INVOICE_PAID", True)
        payment = pay(client, "1000", invoice_id=invoice["id"])
        lr_id = invoice["lorry_receipt_ids"][0]
        assert client.get(f"/lorry-receipts/{lr_id}").json()["status"] == "paid"

        client.patch(f"/payments/{payment['id']}", json={"amount": "400"})
        assert invoice_status(client, invoice["id"]) == "partially_paid"
        assert client.get(f"/lorry-receipts/{lr_id}").json()["status"] == "invoiced"


class TestThnPayments:

    def test_thn_balance_follows_payments(self, client, thn):
        pay(client, "2000", truck_hiring_note_id=thn["id"])
        data = client.get(f"/truck-hiring-notes/{thn['id']}").json()
        assert (Decimal(data["paid_amount"]), Decimal(data["balance_amount"]), data["status"]) == \
            (Decimal("2000"), Decimal("3000"), "partially_paid")

        pay(client, "3000", truck_hiring_note_id=thn["id"])
        data = client.get(f"/truck-hiring-notes/{thn['id']}").json()
        assert (Decimal(data["balance_amount"]), data["status"]) == (Decimal("0"), "paid")

        pay(client, "500", truck_hiring_note_id=thn["id"])
        data = client.get(f"/truck-hiring-notes/{thn['id']}").json()
        assert (Decimal(data["balance_amount"]), data["status"]) == (Decimal("-500"), "paid")

    def test_advance_follows_advance_payments(self, client):
        thn = client.post("/truck-hiring-notes/", json={
            "truck_owner_name": "Murugan Transports",
            "truck_number": "TN 45 AB 1234",
            "driver_name": "Ravi",
            "driver_license": "TN4520190001234",
            "origin": "Chennai",
            "destination": "Bengaluru",
            "goods_type": "Textiles",
            "weight": "12",
            "freight": "5000",
            "advance_paid": "1000"
        }).json()
        assert Decimal(thn["advance_paid"]) == Decimal("1000")
        advance = client.get("/payments/", params={"truck_hiring_note_id": thn["id"]}).json()["items"][0]

        client.patch(f"/payments/{advance['id']}", json={"amount": "1500"})
        data = client.get(f"/truck-hiring-notes/{thn['id']}").json()
        assert Decimal(data["advance_paid"]) == Decimal("1500")

        pay(client, "500", truck_hiring_note_id=thn["id"])
        client.delete(f"/payments/{advance['id']}")
        data = client.get(f"/truck-hiring-notes/{thn['id']}").json()
        assert Decimal(data["advance_paid"]) == Decimal("0")
        assert Decimal(data["paid_amount"]) == Decimal("500")
        assert data["status"] == "partially_paid"


class TestPaymentTargets:

    def test_exactly_one_target_required(self, client, invoice, thn):
        response = client.post("/payments/", json={"amount": "10", "method": "cash"})
        assert response.status_code == 422

        response = client.post("/payments/", json={
            "amount": "10", "method": "cash", "invoice_id": invoice["id"], "truck_hiring_note_id": thn["id"]
        })
        assert response.status_code == 422

    def test_non_positive_amount_rejected(self, client, invoice):
        response = client.post("/payments/", json={"amount": "0", "method": "cash", "invoice_id": invoice["id"]})
        assert response.status_code == 422

    def test_unknown_target_404(self, client):
        response = client.post("/payments/", json={"amount": "10", "method": "cash", "invoice_id": str(uuid4())})
        assert response.status_code == 404

    def test_retarget_reconciles_both(self, client, invoice, thn):
        payment = pay(client, "1000", invoice_id=invoice["id"])
        assert invoice_status(client, invoice["id"]) == "paid"

        response = client.patch(f"/payments/{payment['id']}", json={"truck_hiring_note_id": thn["id"]})
        assert response.status_code == 200
        assert response.json()["invoice_id"] is None

        assert invoice_status(client, invoice["id"]) == "unpaid"
        data = client.get(f"/truck-hiring-notes/{thn['id']}").json()
        assert data["status"] == "partially_paid"
        assert Decimal(data["paid_amount"]) == Decimal("1000")

    def test_retarget_to_invoice_takes_its_customer(self, client, invoice, sample_consignee, sample_customer, sample_vehicle):
        lr = client.post("/lorry-receipts/", json={
            "consignor_id": str(sample_consignee.id),
            "consignee_id": str(sample_customer.id),
            "vehicle_id": str(sample_vehicle.id),
            "from_place": "Pune",
            "to_place": "Hosur",
            "charges": {"freight": "800"}
        }).json()
        other = client.post("/invoices/", json={
            "customer_id": str(sample_consignee.id),
            "lorry_receipt_ids": [lr["id"]],
            "is_rcm": True
        }).json()
        payment = pay(client, "100", invoice_id=invoice["id"])
        assert payment["customer_id"] == str(sample_customer.id)

        response = client.patch(f"/payments/{payment['id']}", json={"invoice_id": other["id"]})
        assert response.status_code == 200
        assert response.json()["customer_id"] == str(sample_consignee.id)

    def test_retarget_to_thn_clears_customer(self, client, invoice, thn):
        payment = pay(client, "100", invoice_id=invoice["id"])
        response = client.patch(f"/payments/{payment['id']}", json={"truck_hiring_note_id": thn["id"]})
        assert response.json()["customer_id"] is None

    def test_update_with_unknown_customer_404(self, client, invoice):
        payment = pay(client, "100", invoice_id=invoice["id"])
        response = client.patch(f"/payments/{payment['id']}", json={"customer_id": str(uuid4())})
        assert response.status_code == 404
        assert client.get(f"/payments/{payment['id']}").json()["customer_id"] is not None

    def test_list_by_target(self, client, invoice, thn):
        pay(client, "10", invoice_id=invoice["id"])
        pay(client, "20", truck_hiring_note_id=thn["id"])
        response = client.get("/payments/", params={"invoice_id": invoice["id"]})
        assert response.json()["total"] == 1
        assert Decimal(response.json()["items"][0]["amount"]) == Decimal("10")


class TestReconciliation:

    def test_missing_targets_are_noops(self, db_session):
        reconcile_invoice(db_session, uuid4())
        reconcile_thn(db_session, uuid4())

    def test_idempotent(self, client, db_session, invoice):
        pay(client, "400", invoice_id=invoice["id"])
        invoice_id = UUID(invoice["id"])
        reconcile_invoice(db_session, invoice_id)
        reconcile_invoice(db_session, invoice_id)
        assert db_session.get(Invoice, invoice_id).status == PaymentStatus.PARTIALLY_PAID
