"""
Tests for invoices

Covers:
- GST totals (CGST/SGST, IGST, manual GST, reverse charge)
- LR lifecycle on create, edit and delete
- One invoice per LR
- Deletion refused while payments exist
- Status following the grand total
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.modules.invoices.models import GstType
from app.modules.invoices.service import calculate_invoice_totals


@pytest.fixture
def create_lr(client, sample_customer, sample_consignee, sample_vehicle):
    def _create(freight="1000"):
        response = client.post("/lorry-receipts/", json={
            "consignor_id": str(sample_customer.id),
            "consignee_id": str(sample_consignee.id),
            "vehicle_id": str(sample_vehicle.id),
            "from_place": "Chennai",
            "to_place": "Mumbai",
            "charges": {"freight": freight}
        })
        assert response.status_code == 201
        return response.json()
    return _create


@pytest.fixture
def create_invoice(client, sample_customer):
    def _create(lr_ids, **extra):
        return client.post("/invoices/", json={
            "customer_id": str(sample_customer.id),
            "lorry_receipt_ids": lr_ids,
            **extra
        })
    return _create


def lr_status(client, lr_id):
    return client.get(f"/lorry-receipts/{lr_id}").json()["status"]


def gst(**overrides):
    values = dict(
        gst_type=GstType.CGST_SGST, cgst_rate=Decimal("9"), sgst_rate=Decimal("9"), igst_rate=Decimal("18"),
        is_rcm=False, is_manual_gst=False,
        cgst_amount=Decimal("0"), sgst_amount=Decimal("0"), igst_amount=Decimal("0")
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestInvoiceTotals:
    """Tests for calculate_invoice_totals"""

    lrs = [SimpleNamespace(total_amount=Decimal("1000")), SimpleNamespace(total_amount=Decimal("500.25"))]

    def test_cgst_sgst(self):
        totals = calculate_invoice_totals(self.lrs, gst())
        assert totals.total_amount == Decimal("1500.25")
        assert totals.cgst_amount == Decimal("135.02")
        assert totals.sgst_amount == Decimal("135.02")
        assert totals.igst_amount == Decimal("0")
        assert totals.grand_total == Decimal("1770.29")

    def test_igst(self):
        totals = calculate_invoice_totals(self.lrs, gst(gst_type=GstType.IGST))
        assert totals.cgst_amount == Decimal("0")
        assert totals.igst_amount == Decimal("270.05")
        assert totals.grand_total == Decimal("1770.30")

    def test_manual_gst(self):
        totals = calculate_invoice_totals(self.lrs, gst(
            is_manual_gst=True, cgst_amount=Decimal("100"), sgst_amount=Decimal("100")
        ))
        assert totals.grand_total == Decimal("1700.25")

    def test_reverse_charge_excludes_gst(self):
        totals = calculate_invoice_totals(self.lrs, gst(is_rcm=True))
        assert totals.cgst_amount == Decimal("135.02")
        assert totals.grand_total == Decimal("1500.25")


class TestCreateInvoice:

    def test_create_bills_lrs(self, client, create_lr, create_invoice):
        a, b = create_lr("1000"), create_lr("2000")
        response = create_invoice([b["id"], a["id"]], gst_type="igst")
        assert response.status_code == 201
        data = response.json()

        assert data["invoice_number"] == 1
        assert data["status"] == "unpaid"
        assert data["lorry_receipt_ids"] == [b["id"], a["id"]]
        assert Decimal(data["total_amount"]) == Decimal("3000")
        assert Decimal(data["grand_total"]) == Decimal("3540")
        assert [lr["id"] for lr in data["lorry_receipts"]] == [b["id"], a["id"]]

        assert lr_status(client, a["id"]) == "invoiced"
        assert client.get(f"/lorry-receipts/{a['id']}").json()["invoice_id"] == data["id"]

    def test_lr_on_two_invoices_refused(self, client, create_lr, create_invoice):
        lr = create_lr()
        assert create_invoice([lr["id"]]).status_code == 201

        response = create_invoice([lr["id"]])
        assert response.status_code == 400
        assert "already on invoice 1" in response.json()["detail"]

    def test_duplicate_lr_in_list_rejected(self, create_lr, create_invoice):
        lr = create_lr()
        assert create_invoice([lr["id"], lr["id"]]).status_code == 422

    def test_unknown_lr_404(self, create_invoice):
        assert create_invoice(["00000000-0000-0000-0000-000000000000"]).status_code == 404

    def test_invoice_numbers_from_range(self, client, create_lr, create_invoice):
        client.post("/numbering/configs", json={"document_type": "invoice", "start_number": 2401, "end_number": 2500})
        response = create_invoice([create_lr()["id"]])
        assert response.json()["invoice_number"] == 2401


class TestUpdateInvoice:

    def test_relink_updates_lr_statuses(self, client, create_lr, create_invoice):
        a, b, c = create_lr(), create_lr(), create_lr()
        invoice = create_invoice([a["id"], b["id"]]).json()

        response = client.patch(f"/invoices/{invoice['id']}", json={"lorry_receipt_ids": [c["id"], b["id"]]})
        assert response.status_code == 200
        assert response.json()["lorry_receipt_ids"] == [c["id"], b["id"]]

        assert lr_status(client, a["id"]) == "created"
        assert lr_status(client, b["id"]) == "invoiced"
        assert lr_status(client, c["id"]) == "invoiced"

    def test_grand_total_change_reconciles(self, client, create_lr, create_invoice):
        a, b = create_lr("1000"), create_lr("1000")
        invoice = create_invoice([a["id"]], is_rcm=True).json()
        client.post("/payments/", json={"amount": "1000", "method": "neft", "invoice_id": invoice["id"]})
        assert client.get(f"/invoices/{invoice['id']}").json()["status"] == "paid"

        response = client.patch(f"/invoices/{invoice['id']}", json={"lorry_receipt_ids": [a["id"], b["id"]]})
        assert Decimal(response.json()["grand_total"]) == Decimal("2000")
        assert response.json()["status"] == "partially_paid"


class TestDeleteInvoice:

    def test_delete_releases_lrs(self, client, create_lr, create_invoice):
        lr = create_lr()
        invoice = create_invoice([lr["id"]]).json()
        assert lr_status(client, lr["id"]) == "invoiced"

        response = client.delete(f"/invoices/{invoice['id']}")
        assert response.status_code == 200
        assert lr_status(client, lr["id"]) == "created"
        assert client.get(f"/invoices/{invoice['id']}").status_code == 404

        # Released LR can be billed again and deleted once free
        assert create_invoice([lr["id"]]).status_code == 201

    def test_delete_with_payments_refused(self, client, create_lr, create_invoice):
        invoice = create_invoice([create_lr()["id"]]).json()
        payment = client.post("/payments/", json={
            "amount": "100", "method": "cash", "invoice_id": invoice["id"]
        }).json()

        response = client.delete(f"/invoices/{invoice['id']}")
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete invoice with existing payments"

        client.delete(f"/payments/{payment['id']}")
        assert client.delete(f"/invoices/{invoice['id']}").status_code == 200


class TestListInvoices:

    def test_filter_by_status(self, client, create_lr, create_invoice):
        paid = create_invoice([create_lr("100")["id"]], is_rcm=True).json()
        create_invoice([create_lr("100")["id"]])
        client.post("/payments/", json={"amount": "100", "method": "upi", "invoice_id": paid["id"]})

        response = client.get("/invoices/", params={"status": "paid"})
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["id"] == paid["id"]
        assert Decimal(response.json()["items"][0]["balance_due"]) == Decimal("0")
