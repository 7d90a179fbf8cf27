"""
Menu management tests.
"""

import pytest

from cafe_pos.models import Product, InventoryRecord
from cafe_pos.services.order_service import place_order


class TestProductRoutes:

    def test_create_product(self, client, auth_headers):
        response = client.post('/api/products', headers=auth_headers, json={
            "name": "  Flat White ",
            "category": "Coffee",
            "price_omr": "1.350",
        })

        assert response.status_code == 201
        product = response.get_json()["product"]
        assert product["name"] == "Flat White"
        assert product["category"] == "coffee"
        assert product["price_omr"] == "1.350"
        assert product["is_active"] is True

    @pytest.mark.parametrize("payload,message", [
        ({"name": "X", "category": "coffee"}, "Missing required fields: price_omr"),
        ({"name": "X", "category": "pastry", "price_omr": 1}, "category must be one of"),
        ({"name": "X", "category": "tea", "price_omr": "1.2345"}, "at most 3 decimal places"),
        ({"name": "X", "category": "tea", "price_omr": -1}, "must be >= 0"),
        ({"name": "", "category": "tea", "price_omr": 1}, "name cannot be blank"),
        ({"name": "X", "category": "tea", "price_omr": 1, "id": 5}, "Field not allowed: id"),
    ])
    def test_create_validation(self, client, auth_headers, payload, message):
        response = client.post('/api/products', headers=auth_headers, json=payload)
        assert response.status_code == 400
        assert message in response.get_json()["error"]

    def test_list_ordered_by_category(self, client, auth_headers, make_product):
        make_product("Latte", "coffee", "1.250")
        make_product("Croissant", "bakery", "0.600")
        make_product("Retired", "tea", "0.300", is_active=False)

        body = client.get('/api/products', headers=auth_headers).get_json()
        assert body["count"] == 3
        assert [p["category"] for p in body["products"]] == ["bakery", "coffee", "tea"]

        active = client.get('/api/products/active', headers=auth_headers).get_json()
        assert [p["name"] for p in active["products"]] == ["Croissant", "Latte"]

    def test_update_product(self, client, auth_headers, make_product):
        latte = make_product("Latte", "coffee", "1.250")
        response = client.put(f'/api/products/{latte.id}', headers=auth_headers, json={
            "price_omr": 1.5,
            "is_active": False,
        })
        assert response.status_code == 200
        product = response.get_json()["product"]
        assert product["price_omr"] == "1.500"
        assert product["is_active"] is False

    def test_update_missing(self, client, auth_headers):
        response = client.put('/api/products/424242', headers=auth_headers, json={"name": "X"})
        assert response.status_code == 404

    def test_delete_product_and_stock(self, client, auth_headers, make_product, db_session):
        chips = make_product("Chips", "snack", "0.200", stock=3)
        chips_id = chips.id

        response = client.delete(f'/api/products/{chips_id}', headers=auth_headers)

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(Product, chips_id) is None
        assert db_session.get(InventoryRecord, chips_id) is None

    def test_delete_sold_product_conflicts(self, client, auth_headers, cashier, make_product):
        latte = make_product("Latte", "coffee", "1.250")
        place_order(cashier.id, "Cash", [{"product_id": latte.id, "quantity": 1}])

        response = client.delete(f'/api/products/{latte.id}', headers=auth_headers)
        assert response.status_code == 409

    def test_delete_missing(self, client, auth_headers):
        assert client.delete('/api/products/424242', headers=auth_headers).status_code == 404

    def test_requires_auth(self, client, db_session):
        assert client.get('/api/products').status_code == 401
