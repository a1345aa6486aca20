"""
Tests for customer and company ledgers

Covers:
- Running balance and closing Dr/Cr side
- Date and entry type filters keep true running balances
- Unbilled LR charges
- Company-wide totals, newest first
"""

from decimal import Decimal
from uuid import uuid4

import pytest


@pytest.fixture
def create_lr(client, sample_customer, sample_consignee, sample_vehicle):
    def _create(freight, consignor=None):
        consignor = consignor or sample_customer
        response = client.post("/lorry-receipts/", json={
            "consignor_id": str(consignor.id),
            "consignee_id": str(sample_consignee.id),
            "vehicle_id": str(sample_vehicle.id),
            "from_place": "Tirupattur",
            "to_place": "Bhiwandi",
            "charges": {"freight": freight}
        })
        assert response.status_code == 201
        return response.json()
    return _create


@pytest.fixture
def bill(client, create_lr):
    """Reverse-charge invoice, so the grand total equals the LR freight"""
    def _bill(customer, freight, invoice_date):
        lr = create_lr(freight, consignor=customer)
        response = client.post("/invoices/", json={
            "customer_id": str(customer.id),
            "lorry_receipt_ids": [lr["id"]],
            "invoice_date": invoice_date,
            "is_rcm": True
        })
        assert response.status_code == 201
        return response.json()
    return _bill


def pay(client, invoice, amount, payment_date, **extra):
    response = client.post("/payments/", json={
        "amount": amount, "method": "neft", "invoice_id": invoice["id"], "payment_date": payment_date, **extra
    })
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def account(client, bill, create_lr, sample_customer):
    first = bill(sample_customer, "1000", "2024-07-01")
    pay(client, first, "400", "2024-07-05", reference="UTR123")
    second = bill(sample_customer, "500", "2024-08-01")
    pay(client, second, "1200", "2024-08-10")
    create_lr("250")
    return first, second


class TestCustomerLedger:

    def test_running_balance(self, client, account, sample_customer):
        response = client.get(f"/ledgers/customers/{sample_customer.id}")
        assert response.status_code == 200
        data = response.json()

        assert [e["entry_type"] for e in data["entries"]] == ["invoice", "payment", "invoice", "payment"]
        assert [Decimal(e["balance"]) for e in data["entries"]] == [
            Decimal("1000"), Decimal("600"), Decimal("1100"), Decimal("-100")
        ]
        assert "UTR123" in data["entries"][1]["particulars"]
        assert Decimal(data["total_debit"]) == Decimal("1500")
        assert Decimal(data["total_credit"]) == Decimal("1600")
        assert Decimal(data["closing_balance"]) == Decimal("100")
        assert data["closing_side"] == "Cr"

    def test_unbilled_lr_charges(self, client, account, sample_customer):
        data = client.get(f"/ledgers/customers/{sample_customer.id}").json()
        assert Decimal(data["unbilled_amount"]) == Decimal("250")

    def test_filters_keep_running_balance(self, client, account, sample_customer):
        response = client.get(f"/ledgers/customers/{sample_customer.id}", params={"date_from": "2024-08-01"})
        data = response.json()
        assert [Decimal(e["balance"]) for e in data["entries"]] == [Decimal("1100"), Decimal("-100")]
        assert Decimal(data["total_debit"]) == Decimal("500")
        assert data["closing_side"] == "Cr"

        response = client.get(f"/ledgers/customers/{sample_customer.id}", params={"entry_type": "payment"})
        assert Decimal(response.json()["total_debit"]) == Decimal("0")
        assert Decimal(response.json()["total_credit"]) == Decimal("1600")

    def test_other_customers_excluded(self, client, account, bill, sample_consignee, sample_customer):
        bill(sample_consignee, "700", "2024-07-15")
        data = client.get(f"/ledgers/customers/{sample_customer.id}").json()
        assert len(data["entries"]) == 4

    def test_empty_account_is_debit_zero(self, client, sample_customer):
        data = client.get(f"/ledgers/customers/{sample_customer.id}").json()
        assert data["entries"] == []
        assert Decimal(data["closing_balance"]) == Decimal("0")
        assert data["closing_side"] == "Dr"

    def test_unknown_customer_404(self, client):
        assert client.get(f"/ledgers/customers/{uuid4()}").status_code == 404

    def test_inverted_dates_rejected(self, client, sample_customer):
        response = client.get(f"/ledgers/customers/{sample_customer.id}", params={
            "date_from": "2024-08-01", "date_to": "2024-07-01"
        })
        assert response.status_code == 422


class TestCompanyLedger:

    def test_totals_newest_first(self, client, account, bill, sample_consignee):
        bill(sample_consignee, "700", "2024-07-15")
        data = client.get("/ledgers/company").json()

        assert [e["entry_date"] for e in data["entries"]] == [
            "2024-08-10", "2024-08-01", "2024-07-15", "2024-07-05", "2024-07-01"
        ]
        assert data["entries"][2]["customer_name"] == sample_consignee.name
        assert Decimal(data["total_debit"]) == Decimal("2200")
        assert Decimal(data["total_credit"]) == Decimal("1600")
        assert Decimal(data["net_balance"]) == Decimal("600")

    def test_thn_payments_not_included(self, client, account):
        client.post("/truck-hiring-notes/", json={
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
        })
        data = client.get("/ledgers/company").json()
        assert Decimal(data["total_credit"]) == Decimal("1600")

    def test_date_window(self, client, account):
        data = client.get("/ledgers/company", params={"date_from": "2024-07-01", "date_to": "2024-07-31"}).json()
        assert len(data["entries"]) == 2
        assert Decimal(data["net_balance"]) == Decimal("600")
