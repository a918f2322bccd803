class TestCashDrawer:
    """Tests for /cash endpoints."""

    def test_day_cycle(self, client, seed, cashier_headers):
        opened = client.post("/cash/open", json={"amount": "500"}, headers=cashier_headers)
        assert opened.status_code == 201
        assert client.get("/cash/status", headers=cashier_headers).json()["is_open"] is True

        client.post(
            "/sales/checkout",
            json={"items": [{"product_id": seed.headphones.id, "qty": 1}], "payment_type": "cash"},
            headers=cashier_headers,
        )
        client.post("/cash/expense", json={"amount": "30", "description": "Kargo"}, headers=cashier_headers)

        closed = client.post("/cash/close", json={"amount": "585"}, headers=cashier_headers)

        assert closed.status_code == 200
        summary = closed.json()
        assert summary["expected_cash"] == 590.0
        assert summary["cash_difference"] == -5.0
        assert summary["is_closed"] is True

    def test_open_twice(self, client, cashier_headers, admin_headers):
        client.post("/cash/open", json={"amount": "500"}, headers=cashier_headers)

        response = client.post("/cash/open", json={"amount": "100"}, headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["detail"] == "Kasa bugün zaten açılmış"

    def test_close_without_open(self, client, cashier_headers):
        response = client.post("/cash/close", json={"amount": "0"}, headers=cashier_headers)

        assert response.status_code == 400

    def test_negative_amount_rejected_by_schema(self, client, cashier_headers):
        response = client.post("/cash/open", json={"amount": "-5"}, headers=cashier_headers)

        assert response.status_code == 422

    def test_movements_carry_sale_number(self, client, seed, cashier_headers):
        sale = client.post(
            "/sales/checkout",
            json={"items": [{"product_id": seed.tea.id, "qty": 1}], "payment_type": "pos"},
            headers=cashier_headers,
        ).json()
        client.post("/cash/income", json={"amount": "12.5", "description": "Fotokopi"}, headers=cashier_headers)

        movements = client.get("/cash/movements", headers=cashier_headers).json()

        by_type = {m["movement_type"]: m for m in movements}
        assert by_type["sale"]["sale_number"] == sale["sale_number"]
        assert by_type["sale"]["payment_method"] == "pos"
        assert by_type["income"]["amount"] == 12.5

        summary = client.get("/cash/summary", headers=cashier_headers).json()
        assert summary["total_card_sales"] == 50.0
        assert summary["total_sales"] == 50.0
        assert summary["expected_cash"] == 62.5
