"""Company and product management, image upload, and the per-company catalog."""

from decimal import Decimal


class TestCompanies:
    async def test_admin_lists_and_searches(self, client, seed, admin_headers):
        resp = await client.get("/api/v1/companies", params={"search": "euro"}, headers=admin_headers)
        assert resp.status_code == 200
        assert [c["companyName"] for c in resp.json()["data"]] == ["Euro Imports"]

    async def test_company_exposes_class_and_percent(self, client, seed, admin_headers):
        resp = await client.get(f"/api/v1/companies/{seed.eu_company.id}", headers=admin_headers)
        data = resp.json()["data"]
        assert data["className"] == "International - EU"
        assert Decimal(data["supportFundPercent"]) == Decimal("10")

    async def test_client_reads_only_own_company(self, client, seed, us_headers):
        own = await client.get(f"/api/v1/companies/{seed.us_company.id}", headers=us_headers)
        assert own.status_code == 200
        other = await client.get(f"/api/v1/companies/{seed.eu_company.id}", headers=us_headers)
        assert other.status_code == 403
        listing = await client.get("/api/v1/companies", headers=us_headers)
        assert listing.status_code == 403

    async def test_create_update_delete(self, client, seed, admin_headers):
        resp = await client.post(
            "/api/v1/companies",
            json={"companyName": "New Partner", "companyEmail": "hq@new.test"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        company = resp.json()["data"]
        assert company["className"] is None
        assert Decimal(company["supportFundPercent"]) == 0

        resp = await client.put(
            f"/api/v1/companies/{company['id']}",
            json={"companyName": "Renamed Partner"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["companyName"] == "Renamed Partner"

        resp = await client.delete(f"/api/v1/companies/{company['id']}", headers=admin_headers)
        assert resp.status_code == 204
        resp = await client.get(f"/api/v1/companies/{company['id']}", headers=admin_headers)
        assert resp.status_code == 404

    async def test_unknown_class_reference(self, client, seed, admin_headers):
        resp = await client.post(
            "/api/v1/companies",
            json={"companyName": "Broken", "classId": "00000000-0000-0000-0000-000000000000"},
            headers=admin_headers,
        )
        assert resp.status_code == 422


class TestProducts:
    async def test_create_and_duplicate_sku(self, client, seed, admin_headers):
        body = {
            "sku": "NEW-01",
            "itemName": "New Noodles",
            "priceAmericas": "2.50",
            "priceInternational": "3.00",
            "casePack": 24,
        }
        resp = await client.post("/api/v1/products", json=body, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json()["data"]["enable"] is True

        resp = await client.post("/api/v1/products", json=body, headers=admin_headers)
        assert resp.status_code == 409

    async def test_invalid_case_pack(self, client, seed, admin_headers):
        body = {
            "sku": "BAD-01",
            "itemName": "Bad",
            "priceAmericas": "1.00",
            "priceInternational": "1.00",
            "casePack": 0,
        }
        resp = await client.post("/api/v1/products", json=body, headers=admin_headers)
        assert resp.status_code == 422

    async def test_update_cannot_clear_price(self, client, seed, admin_headers):
        resp = await client.put(
            f"/api/v1/products/{seed.chips.id}", json={"priceAmericas": None}, headers=admin_headers
        )
        assert resp.status_code == 422

    async def test_update_price(self, client, seed, admin_headers):
        resp = await client.put(
            f"/api/v1/products/{seed.chips.id}", json={"priceAmericas": "4.25"}, headers=admin_headers
        )
        assert resp.status_code == 200
        assert Decimal(resp.json()["data"]["priceAmericas"]) == Decimal("4.25")

    async def test_filter_enabled(self, client, seed, admin_headers):
        resp = await client.get("/api/v1/products", params={"enabled": "false"}, headers=admin_headers)
        assert [p["sku"] for p in resp.json()["data"]] == ["OLD-01"]

    async def test_clients_cannot_manage_products(self, client, seed, us_headers):
        resp = await client.get("/api/v1/products", headers=us_headers)
        assert resp.status_code == 403

    async def test_image_upload(self, client, seed, admin_headers, storage):
        resp = await client.post(
            f"/api/v1/products/{seed.chips.id}/image",
            files={"file": ("chips photo.png", b"\x89PNG fake", "image/png")},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text
        assert ("product-images", f"{seed.chips.id}/chips_photo.png") in storage.objects
        assert resp.json()["data"]["pictureUrl"].endswith(
            f"/object/public/product-images/{seed.chips.id}/chips_photo.png"
        )

    async def test_image_upload_rejects_non_images(self, client, seed, admin_headers, storage):
        resp = await client.post(
            f"/api/v1/products/{seed.chips.id}/image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=admin_headers,
        )
        assert resp.status_code == 422
        assert storage.objects == {}


class TestCatalog:
    async def test_americas_catalog(self, client, seed, us_headers):
        resp = await client.get("/api/v1/catalog", headers=us_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["priceTier"] == "americas"
        assert [(p["sku"], Decimal(p["unitPrice"])) for p in data["products"]] == [
            ("CHIP-01", Decimal("4.00")),
            ("TEA-01", Decimal("10.00")),
        ]
        assert data["products"][0]["categoryName"] == "Snacks"

    async def test_international_catalog(self, client, seed, eu_headers):
        resp = await client.get("/api/v1/catalog", headers=eu_headers)
        data = resp.json()["data"]
        assert data["priceTier"] == "international"
        assert [p["sku"] for p in data["products"]] == ["CHIP-01", "EU-01", "TEA-01"]
        assert Decimal(data["products"][2]["unitPrice"]) == Decimal("12.50")

    async def test_catalog_search(self, client, seed, us_headers):
        resp = await client.get("/api/v1/catalog", params={"search": "tea"}, headers=us_headers)
        assert [p["sku"] for p in resp.json()["data"]["products"]] == ["TEA-01"]

    async def test_admin_must_pick_company(self, client, seed, admin_headers):
        resp = await client.get("/api/v1/catalog", headers=admin_headers)
        assert resp.status_code == 422
        resp = await client.get(
            "/api/v1/catalog", params={"companyId": seed.bare_company.id}, headers=admin_headers
        )
        # No class means Americas pricing
        assert resp.json()["data"]["priceTier"] == "americas"

    async def test_client_cannot_browse_other_company(self, client, seed, us_headers):
        resp = await client.get(
            "/api/v1/catalog", params={"companyId": seed.eu_company.id}, headers=us_headers
        )
        assert resp.status_code == 403


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
