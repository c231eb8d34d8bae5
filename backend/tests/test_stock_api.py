"""API tests for balances, the ledger and the consistency check."""

from decimal import Decimal

from stockflow.models.stock import StockOnHand


API = "/api/v1"


class TestStockReads:
    def test_balances_envelope(self, client, auth_headers, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("12.5"))

        response = client.get(f"{API}/stock/", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        row = body["data"]["items"][0]
        assert row["product_id"] == test_product.id
        assert row["quantity"] == 12.5
        assert row["reserved"] == 0.0
        assert row["available"] == 12.5

    def test_reserved_reduces_available(
        self, client, db_session, auth_headers, test_product, test_warehouse, stock_level
    ):
        stock = stock_level(test_product, test_warehouse, Decimal("10"))
        stock.reserved_qty = Decimal("4")
        db_session.commit()

        row = client.get(f"{API}/stock/", headers=auth_headers).json()["data"]["items"][0]
        assert row["available"] == 6.0

    def test_filter_by_warehouse(
        self, client, auth_headers, test_product, test_warehouse, second_warehouse, stock_level
    ):
        stock_level(test_product, test_warehouse, Decimal("1"))
        stock_level(test_product, second_warehouse, Decimal("2"))

        data = client.get(
            f"{API}/stock/?warehouse_id={second_warehouse.id}", headers=auth_headers
        ).json()["data"]
        assert data["total"] == 1
        assert data["items"][0]["quantity"] == 2.0

    def test_product_stock_unknown_product(self, client, auth_headers):
        response = client.get(f"{API}/stock/products/999", headers=auth_headers)
        assert response.status_code == 404

    def test_ledger_newest_first_and_paginated(
        self, client, auth_headers, test_product, test_warehouse, stock_level
    ):
        for qty in ("1", "2", "3"):
            stock_level(test_product, test_warehouse, Decimal(qty))

        data = client.get(f"{API}/stock/ledger?limit=2", headers=auth_headers).json()["data"]

        assert data["total"] == 3
        assert data["has_more"] is True
        assert [e["qty_delta"] for e in data["items"]] == [3.0, 2.0]

    def test_verify_consistent(self, client, auth_headers, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("9"))

        data = client.get(f"{API}/stock/verify", headers=auth_headers).json()["data"]

        assert data["consistent"] is True
        assert data["mismatches"] == []

    def test_verify_detects_drift(
        self, client, db_session, auth_headers, test_product, test_warehouse, stock_level
    ):
        stock_level(test_product, test_warehouse, Decimal("9"))
        db_session.query(StockOnHand).update({StockOnHand.qty: Decimal("8")})
        db_session.commit()

        data = client.get(f"{API}/stock/verify", headers=auth_headers).json()["data"]

        assert data["consistent"] is False
        assert data["mismatches"][0]["ledger_total"] == 9.0
        assert data["mismatches"][0]["balance_qty"] == 8.0


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_unknown_route_uses_envelope(self, client, auth_headers):
        response = client.get(f"{API}/nope", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["success"] is False
