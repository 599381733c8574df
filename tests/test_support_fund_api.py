"""Support-fund summary and one-time redemption over HTTP."""

import uuid
from decimal import Decimal

from partners_hub.db.base import async_session_factory
from partners_hub.domain import Client


async def _order(client, headers, product, cases, **extra):
    body = {"items": [{"productId": product.id, "caseQty": cases}], "notify": False, **extra}
    resp = await client.post("/api/v1/orders", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def _redeem_body(product, cases):
    return {"items": [{"productId": product.id, "caseQty": cases}]}


class TestSummary:
    async def test_earned_credit_and_eligible_products(self, client, seed, us_headers):
        # 10 cases x 12 units x $10.00 = $1,200; 5% credit = $60
        order = await _order(client, us_headers, seed.tea, 10)

        resp = await client.get(f"/api/v1/orders/{order['id']}/support-fund", headers=us_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert Decimal(data["percent"]) == Decimal("5")
        assert Decimal(data["earned"]) == Decimal("60.00")
        assert Decimal(data["used"]) == 0
        assert Decimal(data["remaining"]) == Decimal("60.00")
        assert Decimal(data["originalTotal"]) == Decimal("1200.00")
        assert data["redeemed"] is False

        # Tea is not listed, EU-01 is hidden from Americas, OLD-01 is disabled
        assert [p["sku"] for p in data["products"]] == ["CHIP-01"]
        chips = data["products"][0]
        assert Decimal(chips["unitPrice"]) == Decimal("4.00")
        # $60 / $4.00 / 6 per case = 2.5
        assert chips["maxCases"] == 2

    async def test_international_company(self, client, seed, eu_headers):
        order = await _order(client, eu_headers, seed.tea, 2)

        resp = await client.get(f"/api/v1/orders/{order['id']}/support-fund", headers=eu_headers)
        data = resp.json()["data"]
        # 2 x 12 x $12.50 = $300 at 10%
        assert Decimal(data["earned"]) == Decimal("30.00")
        assert [p["sku"] for p in data["products"]] == ["CHIP-01", "EU-01"]

    async def test_other_company_cannot_see_summary(self, client, seed, us_headers, eu_headers):
        order = await _order(client, eu_headers, seed.tea, 1)
        resp = await client.get(f"/api/v1/orders/{order['id']}/support-fund", headers=us_headers)
        assert resp.status_code == 403


class TestRedeem:
    async def test_redeem_reduces_total_by_credit_used(self, client, seed, us_headers, outbox):
        order = await _order(client, us_headers, seed.tea, 10)

        resp = await client.post(
            f"/api/v1/orders/{order['id']}/support-fund",
            json=_redeem_body(seed.chips, 2),
            headers=us_headers,
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()["data"]
        assert Decimal(data["earned"]) == Decimal("60.00")
        assert Decimal(data["used"]) == Decimal("48.00")
        assert Decimal(data["remaining"]) == Decimal("12.00")
        assert Decimal(data["finalTotal"]) == Decimal("1152.00")

        redeemed = data["order"]
        assert Decimal(redeemed["totalValue"]) == Decimal("1152.00")
        assert Decimal(redeemed["supportFundUsed"]) == Decimal("48.00")
        sf_items = [i for i in redeemed["items"] if i["isSupportFundItem"]]
        assert [(i["sku"], i["quantity"]) for i in sf_items] == [("CHIP-01", 12)]
        assert sf_items[0]["sortOrder"] == 1

        assert len(outbox) == 1
        assert outbox[0]["subject"] == "New Order received"
        assert "Order completed with support fund redemption" in outbox[0]["html"]

        # Summary afterwards reconstructs the original total and lists nothing
        resp = await client.get(f"/api/v1/orders/{order['id']}/support-fund", headers=us_headers)
        summary = resp.json()["data"]
        assert summary["redeemed"] is True
        assert Decimal(summary["originalTotal"]) == Decimal("1200.00")
        assert Decimal(summary["finalTotal"]) == Decimal("1152.00")
        assert Decimal(summary["remaining"]) == Decimal("12.00")
        assert summary["products"] == []

    async def test_overspend_is_rejected_and_order_untouched(self, client, seed, us_headers, outbox):
        order = await _order(client, us_headers, seed.tea, 10)

        # 3 cases = $72 against $60 of credit
        resp = await client.post(
            f"/api/v1/orders/{order['id']}/support-fund",
            json=_redeem_body(seed.chips, 3),
            headers=us_headers,
        )
        assert resp.status_code == 422
        assert "exceeds available credit" in resp.json()["error"]["message"]

        resp = await client.get(f"/api/v1/orders/{order['id']}", headers=us_headers)
        current = resp.json()["data"]
        assert Decimal(current["totalValue"]) == Decimal("1200.00")
        assert Decimal(current["supportFundUsed"]) == 0
        assert len(current["items"]) == 1
        assert outbox == []

    async def test_second_redemption_conflicts(self, client, seed, us_headers):
        order = await _order(client, us_headers, seed.tea, 10)
        url = f"/api/v1/orders/{order['id']}/support-fund"

        first = await client.post(url, json=_redeem_body(seed.chips, 1), headers=us_headers)
        assert first.status_code == 200
        second = await client.post(url, json=_redeem_body(seed.chips, 1), headers=us_headers)
        assert second.status_code == 409

    async def test_ineligible_product(self, client, seed, us_headers):
        order = await _order(client, us_headers, seed.tea, 10)
        for product in (seed.tea, seed.eu_only, seed.retired):
            resp = await client.post(
                f"/api/v1/orders/{order['id']}/support-fund",
                json=_redeem_body(product, 1),
                headers=us_headers,
            )
            assert resp.status_code == 422

    async def test_only_open_orders(self, client, seed, us_headers, admin_headers):
        order = await _order(client, us_headers, seed.tea, 10)
        await client.patch(
            f"/api/v1/orders/{order['id']}/status",
            json={"status": "Cancelled", "notify": False},
            headers=admin_headers,
        )
        resp = await client.post(
            f"/api/v1/orders/{order['id']}/support-fund",
            json=_redeem_body(seed.chips, 1),
            headers=us_headers,
        )
        assert resp.status_code == 409

    async def test_items_locked_after_redemption(self, client, seed, us_headers):
        order = await _order(client, us_headers, seed.tea, 10)
        await client.post(
            f"/api/v1/orders/{order['id']}/support-fund",
            json=_redeem_body(seed.chips, 1),
            headers=us_headers,
        )
        resp = await client.put(
            f"/api/v1/orders/{order['id']}/items",
            json={"items": [{"productId": seed.tea.id, "caseQty": 1}]},
            headers=us_headers,
        )
        assert resp.status_code == 409

    async def test_redemption_recorded_in_history(self, client, seed, us_headers):
        order = await _order(client, us_headers, seed.tea, 10)
        await client.post(
            f"/api/v1/orders/{order['id']}/support-fund",
            json=_redeem_body(seed.chips, 2),
            headers=us_headers,
        )
        resp = await client.get(f"/api/v1/orders/{order['id']}/history", headers=us_headers)
        entry = next(e for e in resp.json()["data"] if e["actionType"] == "support_fund_redeemed")
        assert entry["changedByRole"] == "client"
        assert entry["metadata"]["used"] == "48.00"
        assert entry["metadata"]["final_total"] == "1152.00"

    async def test_coworker_cannot_redeem_anothers_order(self, client, seed, us_headers, token_for):
        async with async_session_factory() as s:
            coworker = Client(
                id=str(uuid.uuid4()), name="Olga Other", email="olga@acme.test", company_id=seed.us_company.id
            )
            s.add(coworker)
            await s.commit()
        coworker_headers = {"Authorization": f"Bearer {token_for(coworker.id)}"}
        order = await _order(client, us_headers, seed.tea, 10)

        # Same company, so the order itself is readable
        resp = await client.get(f"/api/v1/orders/{order['id']}/support-fund", headers=coworker_headers)
        assert resp.status_code == 200

        resp = await client.post(
            f"/api/v1/orders/{order['id']}/support-fund",
            json=_redeem_body(seed.chips, 2),
            headers=coworker_headers,
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "FORBIDDEN"

        resp = await client.get(f"/api/v1/orders/{order['id']}", headers=us_headers)
        data = resp.json()["data"]
        assert Decimal(data["totalValue"]) == Decimal("1200.00")
        assert Decimal(data["supportFundUsed"]) == 0

    async def test_admin_can_redeem_for_client(self, client, seed, us_headers, admin_headers):
        order = await _order(client, us_headers, seed.tea, 10)
        resp = await client.post(
            f"/api/v1/orders/{order['id']}/support-fund",
            json=_redeem_body(seed.chips, 2),
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text
        assert Decimal(resp.json()["data"]["finalTotal"]) == Decimal("1152.00")
