"""
Tests for customers, vehicles and suppliers

Covers:
- Customer CRUD, GSTIN and phone validation, search
- Vehicle number normalisation and uniqueness
- Supplier CRUD
- Refusing to delete masters still referenced by documents
"""

from app.common.validators import format_vehicle_number, validate_gstin, validate_indian_phone


class TestValidators:

    def test_gstin(self):
        assert validate_gstin("33ITWPS2062F1Z7")
        assert validate_gstin("27aaaaa0000a1z5")
        assert not validate_gstin("33ITWPS2062F1Z")
        assert not validate_gstin("")

    def test_phone(self):
        assert validate_indian_phone("9876543210")
        assert validate_indian_phone("+91 98765 43210")
        assert not validate_indian_phone("12345")

    def test_vehicle_number_format(self):
        assert format_vehicle_number("tn20ax1234") == "TN 20 AX 1234"
        assert format_vehicle_number("MH-04-CZ-9012") == "MH 04 CZ 9012"
        assert format_vehicle_number("not a truck") is None


class TestCustomerEndpoints:

    def test_create_and_get(self, client):
        response = client.post("/customers/", json={
            "name": "Reliance Industries Limited",
            "state": "Maharashtra",
            "gstin": "27aabcr1234d1z2",
            "contact_email": "procurement@reliance.com"
        })
        assert response.status_code == 201
        data = response.json()
        assert data["gstin"] == "27AABCR1234D1Z2"

        response = client.get(f"/customers/{data['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Reliance Industries Limited"

    def test_invalid_gstin_rejected(self, client):
        response = client.post("/customers/", json={"name": "Bad GST", "gstin": "1234"})
        assert response.status_code == 422

    def test_duplicate_gstin_conflict(self, client, sample_customer):
        response = client.post("/customers/", json={"name": "Copy", "gstin": sample_customer.gstin})
        assert response.status_code == 409

    def test_search(self, client, sample_customer, sample_consignee):
        response = client.get("/customers/", params={"search": "navakar"})
        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["id"] == str(sample_customer.id)

    def test_list_pagination(self, client, sample_customer, sample_consignee):
        response = client.get("/customers/")
        assert response.status_code == 200
        assert response.json()["total"] == 2

        response = client.get("/customers/", params={"limit": 1, "offset": 1})
        data = response.json()
        assert len(data["items"]) == 1
        assert data["limit"] == 1
        assert data["offset"] == 1

    def test_update(self, client, sample_customer):
        response = client.patch(f"/customers/{sample_customer.id}", json={"contact_person": "Mr. Jain"})
        assert response.status_code == 200
        assert response.json()["contact_person"] == "Mr. Jain"
        assert response.json()["name"] == sample_customer.name

    def test_missing_customer_404(self, client):
        assert client.get("/customers/00000000-0000-0000-0000-000000000000").status_code == 404

    def test_delete_unused_customer(self, client, sample_customer):
        response = client.delete(f"/customers/{sample_customer.id}")
        assert response.status_code == 200
        assert client.get(f"/customers/{sample_customer.id}").status_code == 404

    def test_delete_referenced_customer_refused(self, client, sample_customer, sample_consignee, sample_vehicle):
        client.post("/lorry-receipts/", json={
            "consignor_id": str(sample_customer.id),
            "consignee_id": str(sample_consignee.id),
            "vehicle_id": str(sample_vehicle.id),
            "from_place": "Tirupattur",
            "to_place": "Bhiwandi"
        })
        response = client.delete(f"/customers/{sample_consignee.id}")
        assert response.status_code == 400


class TestVehicleEndpoints:

    def test_create_normalises_number(self, client):
        response = client.post("/vehicles/", json={"number": "tn19by5678"})
        assert response.status_code == 201
        assert response.json()["number"] == "TN 19 BY 5678"

    def test_invalid_number_rejected(self, client):
        assert client.post("/vehicles/", json={"number": "XYZW"}).status_code == 422

    def test_duplicate_number_conflict(self, client, sample_vehicle):
        response = client.post("/vehicles/", json={"number": "TN20AX1234"})
        assert response.status_code == 409

    def test_list(self, client, sample_vehicle):
        response = client.get("/vehicles/")
        assert [v["number"] for v in response.json()] == ["TN 20 AX 1234"]


class TestSupplierEndpoints:

    def test_create_and_get(self, client):
        response = client.post("/suppliers/", json={
            "name": "Murugan Transports",
            "contact_phone": "+91 94430 12345",
            "payment_terms": "Advance 30%, balance on delivery"
        })
        assert response.status_code == 201
        supplier_id = response.json()["id"]

        response = client.get(f"/suppliers/{supplier_id}")
        assert response.status_code == 200
        assert response.json()["payment_terms"] == "Advance 30%, balance on delivery"

    def test_invalid_phone_rejected(self, client):
        assert client.post("/suppliers/", json={"name": "Bad", "contact_phone": "123"}).status_code == 422

    def test_search_and_update(self, client, sample_supplier):
        client.post("/suppliers/", json={"name": "Murugan Transports"})
        response = client.get("/suppliers/", params={"search": "balaji"})
        assert [s["id"] for s in response.json()] == [str(sample_supplier.id)]

        response = client.patch(f"/suppliers/{sample_supplier.id}", json={"notes": "Owns 12 trucks"})
        assert response.json()["notes"] == "Owns 12 trucks"
        assert response.json()["name"] == sample_supplier.name

    def test_delete_unused_supplier(self, client, sample_supplier):
        assert client.delete(f"/suppliers/{sample_supplier.id}").status_code == 200
        assert client.get(f"/suppliers/{sample_supplier.id}").status_code == 404

    def test_delete_supplier_with_thn_refused(self, client, sample_supplier):
        response = client.post("/truck-hiring-notes/", json={
            "supplier_id": str(sample_supplier.id),
            "truck_owner_name": sample_supplier.name,
            "truck_number": "TN 45 AB 1234",
            "driver_name": "Suresh",
            "driver_license": "TN4520190005678",
            "origin": "Coimbatore",
            "destination": "Hosur",
            "goods_type": "Auto parts",
            "weight": "9.5",
            "freight": "5000"
        })
        assert response.status_code == 201
        assert client.delete(f"/suppliers/{sample_supplier.id}").status_code == 400
