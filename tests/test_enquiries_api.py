from horeca_catalog.config import database


def enquiry_payload(**overrides):
    payload = {
        "name": "Asha Rao",
        "email": "Asha@Example.com",
        "phone": "+91 98765 43210",
        "company": "Rao Hospitality",
        "message": "Need a quote",
        "cartItems": [{"productId": "p1", "productName": "Dinner Plate", "quantity": 24}],
    }
    payload.update(overrides)
    return payload


class TestCreateEnquiry:
    async def test_creates_enquiry_and_customer(self, client, mongo_db):
        response = await client.post("/api/enquiries/", json=enquiry_payload())
        assert response.status_code == 201
        enquiry = response.json()["enquiry"]
        assert enquiry["status"] == "new"
        assert enquiry["email"] == "asha@example.com"
        assert enquiry["cartItems"][0]["quantity"] == 24

        customer = await mongo_db[database.CUSTOMERS].find_one({})
        assert customer["phone"] == "9876543210"
        assert enquiry["customerId"] == str(customer["_id"])

    async def test_singular_category_is_accepted(self, client):
        response = await client.post("/api/enquiries/", json=enquiry_payload(category="Tableware"))
        assert response.json()["enquiry"]["categories"] == ["Tableware"]

    async def test_same_phone_reuses_customer(self, client, mongo_db):
        await client.post("/api/enquiries/", json=enquiry_payload())
        await client.post("/api/enquiries/", json=enquiry_payload(phone="09876543210", company="Rao Hotels"))

        assert await mongo_db[database.CUSTOMERS].count_documents({}) == 1
        customer = await mongo_db[database.CUSTOMERS].find_one({})
        assert customer["company_name"] == "Rao Hotels"

    async def test_invalid_email(self, client):
        response = await client.post("/api/enquiries/", json=enquiry_payload(email="not-an-email"))
        assert response.status_code == 422

    async def test_quantity_must_be_positive(self, client):
        response = await client.post("/api/enquiries/", json=enquiry_payload(
            cartItems=[{"productId": "p1", "productName": "Plate", "quantity": 0}],
        ))
        assert response.status_code == 422


class TestReadAndUpdateEnquiry:
    async def test_list_newest_first_with_status_filter(self, client):
        first = (await client.post("/api/enquiries/", json=enquiry_payload(name="First"))).json()["enquiry"]
        await client.post("/api/enquiries/", json=enquiry_payload(name="Second"))
        await client.put(f"/api/enquiries/{first['id']}", json={"status": "contacted"})

        response = await client.get("/api/enquiries/")
        body = response.json()
        assert body["total"] == 2
        assert body["limit"] == 50
        assert [e["name"] for e in body["enquiries"]] == ["Second", "First"]

        contacted = (await client.get("/api/enquiries/", params={"status": "contacted"})).json()
        assert [e["name"] for e in contacted["enquiries"]] == ["First"]

    async def test_detail_includes_related_enquiries(self, client):
        first = (await client.post("/api/enquiries/", json=enquiry_payload())).json()["enquiry"]
        second = (await client.post("/api/enquiries/", json=enquiry_payload(phone="919876543210"))).json()["enquiry"]
        await client.post("/api/enquiries/", json=enquiry_payload(phone="9123456789", name="Someone Else"))

        response = await client.get(f"/api/enquiries/{second['id']}")
        enquiry = response.json()["enquiry"]
        assert enquiry["customerEnquiriesCount"] == 2
        assert [r["id"] for r in enquiry["relatedEnquiries"]] == [first["id"]]

    async def test_update_notes_and_phone(self, client):
        created = (await client.post("/api/enquiries/", json=enquiry_payload())).json()["enquiry"]
        response = await client.put(f"/api/enquiries/{created['id']}", json={"notes": " called back ", "phone": "9000000000"})
        assert response.status_code == 200
        assert response.json()["enquiry"]["notes"] == "called back"
        assert response.json()["enquiry"]["phone"] == "9000000000"

    async def test_update_rejects_unknown_status(self, client):
        created = (await client.post("/api/enquiries/", json=enquiry_payload())).json()["enquiry"]
        response = await client.put(f"/api/enquiries/{created['id']}", json={"status": "archived"})
        assert response.status_code == 422

    async def test_missing_enquiry(self, client):
        assert (await client.get("/api/enquiries/65f000000000000000000000")).status_code == 404
        assert (await client.put("/api/enquiries/bad-id", json={"notes": "x"})).status_code == 404
