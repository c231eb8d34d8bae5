"""API tests for deliveries."""

from decimal import Decimal

from stockflow.models.stock import StockLedgerEntry


API = "/api/v1"


def _create_delivery(client, headers, warehouse, product, qty, reference="SO-6001"):
    response = client.post(f"{API}/deliveries/", headers=headers, json={
        "reference": reference,
        "warehouse_id": warehouse.id,
        "customer_name": "Northwind Traders",
        "delivery_address": "12 Harbour Road",
        "lines": [{"product_id": product.id, "qty_ordered": qty}],
    })
    assert response.status_code == 201
    return response.json()["data"]


class TestDeliveries:
    def test_ship_reduces_stock(self, client, auth_headers, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("150"))
        delivery = _create_delivery(client, auth_headers, test_warehouse, test_product, 30)

        response = client.post(f"{API}/deliveries/{delivery['id']}/ship", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["reference_number"] == f"DEL-{delivery['id']}"
        assert data["movements"][0]["qty_delta"] == -30.0
        assert data["movements"][0]["new_qty"] == 120.0

        product_stock = client.get(f"{API}/stock/products/{test_product.id}", headers=auth_headers).json()
        assert product_stock["data"]["total_quantity"] == 120.0

    def test_picked_quantity_is_shipped(self, client, auth_headers, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("20"))
        delivery = _create_delivery(client, auth_headers, test_warehouse, test_product, 10)
        line_id = delivery["lines"][0]["id"]
        client.put(
            f"{API}/deliveries/{delivery['id']}/lines/{line_id}",
            headers=auth_headers,
            json={"qty_done": 8},
        )

        client.post(f"{API}/deliveries/{delivery['id']}/ship", headers=auth_headers)

        stock = client.get(f"{API}/stock/products/{test_product.id}", headers=auth_headers).json()["data"]
        assert stock["balances"][0]["quantity"] == 12.0

    def test_insufficient_stock_conflicts(
        self, client, db_session, auth_headers, test_product, test_warehouse, stock_level
    ):
        stock_level(test_product, test_warehouse, Decimal("5"))
        delivery = _create_delivery(client, auth_headers, test_warehouse, test_product, 6)

        response = client.post(f"{API}/deliveries/{delivery['id']}/ship", headers=auth_headers)

        assert response.status_code == 409
        assert "Insufficient stock" in response.json()["message"]
        assert db_session.query(StockLedgerEntry).filter(StockLedgerEntry.ref_type == "delivery").count() == 0

        detail = client.get(f"{API}/deliveries/{delivery['id']}", headers=auth_headers).json()["data"]
        assert detail["status"] == "draft"

    def test_ship_empty_delivery(self, client, auth_headers, test_warehouse):
        response = client.post(f"{API}/deliveries/", headers=auth_headers, json={
            "reference": "SO-6002",
            "warehouse_id": test_warehouse.id,
        })
        delivery_id = response.json()["data"]["id"]

        response = client.post(f"{API}/deliveries/{delivery_id}/ship", headers=auth_headers)
        assert response.status_code == 400

    def test_unknown_product_on_line(self, client, auth_headers, test_warehouse):
        response = client.post(f"{API}/deliveries/", headers=auth_headers, json={
            "reference": "SO-6003",
            "warehouse_id": test_warehouse.id,
            "lines": [{"product_id": 999, "qty_ordered": 1}],
        })
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_ship_unknown_delivery(self, client, auth_headers):
        response = client.post(f"{API}/deliveries/999/ship", headers=auth_headers)
        assert response.status_code == 404

    def test_null_ordered_quantity_rejected(self, client, auth_headers, test_product, test_warehouse):
        delivery = _create_delivery(client, auth_headers, test_warehouse, test_product, 3, reference="SO-6004")
        line_id = delivery["lines"][0]["id"]

        response = client.put(
            f"{API}/deliveries/{delivery['id']}/lines/{line_id}",
            headers=auth_headers,
            json={"qty_ordered": None},
        )

        assert response.status_code == 400
        detail = client.get(f"{API}/deliveries/{delivery['id']}", headers=auth_headers).json()["data"]
        assert detail["lines"][0]["qty_ordered"] == 3.0
