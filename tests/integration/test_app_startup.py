"""
Integration tests for application startup: schema, seed data, lifespan wiring
"""
import pytest
from fastapi.testclient import TestClient

from portal.config import settings
from portal.core.limiter import limiter
from portal.main import app


@pytest.fixture
def live_client(tmp_path, monkeypatch):
    """Client that runs the real lifespan against a temporary database"""
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setattr(settings, "SEED_DEFAULT_DATA", True)
    monkeypatch.setattr(settings, "SENDGRID_API_KEY", None)
    limiter.reset()
    with TestClient(app) as client:
        yield client
    limiter.reset()


@pytest.mark.integration
class TestAppStartup:
    def test_health(self, live_client):
        assert live_client.get("/health").json() == {"status": "healthy"}
        assert live_client.get("/").json()["status"] == "running"

    def test_seeded_product_is_listed(self, live_client):
        products = live_client.get("/api/products").json()
        assert len(products) == 1
        assert products[0]["name"] == "BASE"
        assert products[0]["price"] == 1500
        assert products[0]["min_quantity"] == 10

    def test_seeded_admin_can_log_in(self, live_client):
        response = live_client.post(
            "/api/admin/login",
            json={"username": settings.DEFAULT_ADMIN_USERNAME, "password": settings.DEFAULT_ADMIN_PASSWORD},
        )
        assert response.status_code == 200
        assert live_client.get("/api/admin/me").json()["username"] == "admin"

    def test_unknown_route_uses_message_shape(self, live_client):
        response = live_client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}

    def test_order_flow_with_real_dispatcher(self, live_client):
        live_client.post(
            "/api/register",
            json={
                "email": "live@example.com",
                "password": "password123",
                "company_name": "Live Gym",
                "last_name": "Ito",
                "first_name": "Sho",
                "phone": "03-0000-0000",
            },
        )
        address_id = live_client.post(
            "/api/shipping-addresses",
            json={"label": "Gym", "postal_code": "100-0001", "address": "Chiyoda", "phone": "03"},
        ).json()["address_id"]
        response = live_client.post(
            "/api/orders", json={"shipping_address_id": address_id, "quantity": 30}
        )
        assert response.status_code == 201
        assert response.json()["total_price"] == 45000
