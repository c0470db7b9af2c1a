"""
订单API集成测试
"""


class TestOrdersAPI:
    """订单API测试"""

    def test_create_order(self, client):
        response = client.post("/api/v1/orders", json={"customer_id": "customer-1", "notes": "不要辣"})

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["total_amount_cents"] == 0
        assert data["notes"] == "不要辣"
        assert data["lines"] == []

    def test_get_order(self, client):
        order_id = client.post("/api/v1/orders", json={}).json()["order_id"]

        response = client.get(f"/api/v1/orders/{order_id}")

        assert response.status_code == 200
        assert response.json()["order_id"] == order_id

    def test_get_missing_order(self, client):
        response = client.get("/api/v1/orders/no-such-order")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ORDER_NOT_FOUND"
