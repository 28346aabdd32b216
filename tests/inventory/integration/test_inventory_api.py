"""Integration tests for the /api/inventory endpoints."""

import pytest

ITEM = {
    "name": "Mozzarella",
    "category": "cheese",
    "unit": "kg",
    "current_stock": 40,
    "min_stock_level": 10,
    "max_stock_level": 100,
    "price_per_unit": 420,
    "supplier": {"name": "Dairy Fresh", "contact": "9876543210"},
}


@pytest.fixture()
def admin_headers(admin, bearer):
    return bearer(admin)


@pytest.fixture()
def item_id(client, admin_headers):
    response = client.post("/api/inventory", json=ITEM, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["item"]["id"]


class TestAccess:
    def test_customers_are_forbidden(self, client, customer, bearer):
        assert client.get("/api/inventory", headers=bearer(customer)).status_code == 403


class TestItems:
    def test_create_and_read(self, client, admin_headers, item_id):
        item = client.get(f"/api/inventory/{item_id}", headers=admin_headers).json()["data"]["item"]
        assert item["stock_status"] == "normal"
        assert item["stock_value"] == 16800
        assert item["supplier"]["name"] == "Dairy Fresh"

    def test_duplicate_name(self, client, admin_headers, item_id):
        response = client.post("/api/inventory", json={**ITEM, "name": "MOZZARELLA"}, headers=admin_headers)
        assert response.status_code == 409

    def test_update_thresholds(self, client, admin_headers, item_id):
        response = client.put(f"/api/inventory/{item_id}", json={"min_stock_level": 50}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["item"]["stock_status"] == "low"

    def test_delete_hides_item(self, client, admin_headers, item_id):
        response = client.delete(f"/api/inventory/{item_id}", headers=admin_headers)
        assert response.json()["message"] == "Inventory item deleted successfully"
        assert client.get("/api/inventory", headers=admin_headers).json()["data"]["items"] == []


class TestStock:
    def test_adjust_and_history(self, client, admin_headers, item_id, admin):
        response = client.put(
            f"/api/inventory/{item_id}/stock",
            json={"action": "consumption", "quantity": 35, "reason": "Busy night"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["item"]["current_stock"] == 5

        body = client.get(f"/api/inventory/{item_id}/history", headers=admin_headers).json()
        [movement] = body["data"]["history"]
        assert (movement["previous_stock"], movement["new_stock"]) == (40, 5)
        assert movement["actor"] == str(admin.id)
        assert body["data"]["item"]["name"] == "Mozzarella"

    def test_unknown_action(self, client, admin_headers, item_id):
        response = client.put(
            f"/api/inventory/{item_id}/stock",
            json={"action": "theft", "quantity": 1},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_low_stock_alert_flow(self, client, admin_headers, item_id, mailbox):
        client.put(f"/api/inventory/{item_id}/stock", json={"action": "adjustment", "quantity": 8}, headers=admin_headers)

        low = client.get("/api/inventory/alerts/low-stock", headers=admin_headers).json()["data"]
        assert low["count"] == 1
        # The crossing already alerted, so nothing is pending
        response = client.post("/api/inventory/alerts/send-low-stock", headers=admin_headers)
        assert response.json()["message"] == "No pending low stock alerts"
        assert len(mailbox.sent_to("admin@pizzadelivery.com")) == 1

    def test_bulk_update(self, client, admin_headers, item_id):
        response = client.put(
            "/api/inventory/bulk/stock-update",
            json={
                "updates": [
                    {"item_id": item_id, "action": "restock", "quantity": 10},
                    {"item_id": "missing", "action": "restock", "quantity": 10},
                ]
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Bulk update completed: 1 successful, 1 failed"

    def test_stats(self, client, admin_headers, item_id):
        stats = client.get("/api/inventory/stats/overview", headers=admin_headers).json()["data"]["statistics"]
        assert stats["total_items"] == 1
        assert stats["total_value"] == 16800
