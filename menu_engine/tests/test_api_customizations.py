"""
菜品定制API集成测试
"""

import pytest

from .utils import element_for


@pytest.fixture
def order_id(client):
    return client.post("/api/v1/orders", json={"customer_id": "customer-1"}).json()["order_id"]


@pytest.fixture
def session(client, stored_dish):
    response = client.post("/api/v1/customizations", json={
        "dish_id": stored_dish.id,
        "customer_id": "customer-1",
    })
    assert response.status_code == 201
    return response.json()


class TestCustomizationsAPI:
    """定制会话API测试"""

    def test_open(self, session):
        assert session["status"] == "opened"
        assert session["price"]["total_price_display"] == "8.00"
        assert [e["name"] for e in session["entries"]] == ["可乐", "薯条"]
        assert all(e["is_included"] for e in session["entries"])

    def test_open_missing_dish(self, client):
        response = client.post("/api/v1/customizations", json={"dish_id": "no-such-dish"})

        assert response.status_code == 404
        assert response.json()["error_code"] == "DISH_NOT_FOUND"

    def test_open_withdrawn_dish(self, client, stored_dish):
        client.delete(f"/api/v1/dishes/{stored_dish.id}")
        response = client.post("/api/v1/customizations", json={"dish_id": stored_dish.id})

        assert response.status_code == 404
        assert response.json()["error_code"] == "DISH_UNAVAILABLE"

    def test_end_to_end(self, client, session, stored_dish, menu_items, order_id):
        """8.00 → 9.00 → 8.00 → 9.00，确认后订单行单价 9.00"""
        sid = session["session_id"]
        drink_id = element_for(stored_dish, menu_items["cola"].id).id
        base = f"/api/v1/customizations/{sid}"

        replaced = client.post(f"{base}/replace", json={
            "element_id": drink_id,
            "replacement_item_id": menu_items["juice"].id,
        }).json()
        assert replaced["status"] == "customizing"
        assert replaced["price"]["total_price_display"] == "9.00"
        assert replaced["price"]["lines"] == [{
            "element_id": drink_id,
            "label": "橙汁",
            "amount_cents": 100,
            "amount_display": "1.00",
        }]
        assert replaced["entries"][0]["name"] == "橙汁"

        excluded = client.post(f"{base}/toggle", json={"element_id": drink_id}).json()
        assert excluded["price"]["total_price_display"] == "8.00"

        client.post(f"{base}/replace", json={
            "element_id": drink_id,
            "replacement_item_id": menu_items["juice"].id,
        })
        confirmed = client.post(f"{base}/confirm", json={"order_id": order_id})

        assert confirmed.status_code == 200
        body = confirmed.json()
        assert body["status"] == "confirmed"
        assert body["order_id"] == order_id

        line = client.get(f"/api/v1/customizations/lines/{body['line_id']}").json()
        assert line["unit_price_display"] == "9.00"
        assert len(line["customizations"]) == 2
        juice = [c for c in line["customizations"] if c["replacement_item_id"]]
        assert juice[0]["price_adjustment_cents"] == 100

        order = client.get(f"/api/v1/orders/{order_id}").json()
        assert order["total_amount_cents"] == 900
        assert len(order["lines"][0]["customizations"]) == 1

    def test_clear_replacement(self, client, session, stored_dish, menu_items):
        sid = session["session_id"]
        fries_id = element_for(stored_dish, menu_items["fries"].id).id

        client.post(f"/api/v1/customizations/{sid}/replace", json={
            "element_id": fries_id,
            "replacement_item_id": menu_items["salad"].id,
        })
        cleared = client.post(f"/api/v1/customizations/{sid}/clear-replacement",
                              json={"element_id": fries_id}).json()

        assert cleared["price"]["total_price_display"] == "8.00"
        assert cleared["entries"][1]["replacement_item_id"] is None

    def test_unknown_replacement(self, client, session, stored_dish, menu_items):
        sid = session["session_id"]
        drink_id = element_for(stored_dish, menu_items["cola"].id).id

        response = client.post(f"/api/v1/customizations/{sid}/replace", json={
            "element_id": drink_id,
            "replacement_item_id": menu_items["salad"].id,
        })

        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_REPLACEMENT"
        current = client.get(f"/api/v1/customizations/{sid}").json()
        assert current["price"]["total_price_display"] == "8.00"

    def test_unknown_element(self, client, session):
        response = client.post(f"/api/v1/customizations/{session['session_id']}/toggle",
                               json={"element_id": "nope"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_ELEMENT"

    def test_confirm_after_withdraw(self, client, session, stored_dish, order_id):
        """确认时菜品已下架，返回校验问题，会话可继续"""
        sid = session["session_id"]
        client.delete(f"/api/v1/dishes/{stored_dish.id}")

        response = client.post(f"/api/v1/customizations/{sid}/confirm", json={"order_id": order_id})

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "CUSTOMIZATION_INVALID"
        assert body["details"]["issues"][0]["reason"] == "DISH_UNAVAILABLE"
        assert client.get(f"/api/v1/customizations/{sid}").json()["status"] == "customizing"

    def test_confirm_reports_charged_price(self, client, session, stored_dish, order_id):
        """定制中途基础价调整，确认响应的总价与写入的单价一致"""
        sid = session["session_id"]
        client.patch(f"/api/v1/dishes/{stored_dish.id}", json={"base_price_cents": 850})

        body = client.post(f"/api/v1/customizations/{sid}/confirm", json={"order_id": order_id}).json()
        line = client.get(f"/api/v1/customizations/lines/{body['line_id']}").json()

        assert body["price"]["total_price_cents"] == 850
        assert line["unit_price_cents"] == 850

    def test_confirm_unknown_order(self, client, session):
        sid = session["session_id"]

        response = client.post(f"/api/v1/customizations/{sid}/confirm", json={"order_id": "no-such-order"})

        assert response.status_code == 404
        assert response.json()["error_code"] == "ORDER_NOT_FOUND"
        assert client.get(f"/api/v1/customizations/{sid}").json()["status"] == "customizing"

    def test_confirm_invalid_quantity(self, client, session, order_id):
        response = client.post(f"/api/v1/customizations/{session['session_id']}/confirm",
                               json={"order_id": order_id, "quantity": 0})

        assert response.status_code == 422

    def test_cancel(self, client, session, stored_dish, menu_items):
        sid = session["session_id"]

        cancelled = client.post(f"/api/v1/customizations/{sid}/cancel")
        assert cancelled.json()["status"] == "cancelled"

        drink_id = element_for(stored_dish, menu_items["cola"].id).id
        response = client.post(f"/api/v1/customizations/{sid}/toggle", json={"element_id": drink_id})
        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_CLOSED"

    def test_unknown_session(self, client):
        response = client.get("/api/v1/customizations/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_unknown_line(self, client):
        response = client.get("/api/v1/customizations/lines/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "LINE_NOT_FOUND"
