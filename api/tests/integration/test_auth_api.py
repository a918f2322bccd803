from retailpos.core.security import decode_access_token
from retailpos.services.cart import CartStore


class TestAuth:
    """Tests for /auth endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_login(self, client, seed):
        response = client.post("/auth/login", json={"email": "KASA@example.com", "password": "secret123"})

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == seed.cashier.id
        assert data["role"] == "cashier"
        assert data["token_type"] == "bearer"

    def test_token_carries_role_and_branch(self, client, seed):
        token = client.post(
            "/auth/login", json={"email": "admin@example.com", "password": "secret123"}
        ).json()["access_token"]

        claims = decode_access_token(token)

        assert claims["sub"] == str(seed.admin.id)
        assert claims["role"] == "admin"
        assert claims["branch_id"] == seed.branch.id

    def test_login_wrong_password(self, client):
        response = client.post("/auth/login", json={"email": "kasa@example.com", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["detail"] == "E-posta veya şifre hatalı"

    def test_token_from_login_is_accepted(self, client):
        token = client.post(
            "/auth/login", json={"email": "admin@example.com", "password": "secret123"}
        ).json()["access_token"]

        response = client.get("/pos/cart", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    def test_missing_token(self, client):
        assert client.get("/sales").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/sales", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_logout_discards_cart(self, client, seed, cashier_headers):
        client.post("/pos/cart/items", json={"product_id": seed.tea.id}, headers=cashier_headers)
        store: CartStore = client.app.state.cart_store

        response = client.post("/auth/logout", headers=cashier_headers)

        assert response.status_code == 200
        assert store.get(seed.cashier.id).is_empty
