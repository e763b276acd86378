"""
Pytest configuration - shared fixtures
"""
import sys
import os
import threading
from typing import Any, Dict, Generator, List, Tuple

import pytest
from fastapi.testclient import TestClient

# Add backend directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../backend"))

from portal.core.security import get_password_hash
from portal.database import Database, create_database
from portal.services.address_service import address_service
from portal.services.auth_service import auth_service
from portal.services.product_service import product_service

TEST_PASSWORD = "password123"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


class RecordingNotifier:
    """Stands in for NotificationDispatcher; keeps every dispatched email."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def dispatch(self, to: str, subject: str, html_body: str) -> None:
        with self._lock:
            self.sent.append((to, subject, html_body))

    def recipients(self) -> List[str]:
        return [to for to, _, _ in self.sent]

    def subjects(self) -> List[str]:
        return [subject for _, subject, _ in self.sent]


@pytest.fixture
def test_db(tmp_path) -> Generator[Database, None, None]:
    """Fresh SQLite file database with the full schema"""
    db = create_database(f"sqlite:///{tmp_path / 'portal.db'}")
    db.create_schema()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def product(test_db) -> Dict[str, Any]:
    """Active product: 1500 per bag, minimum 10, step 10"""
    return product_service.create_product(
        test_db,
        {
            "name": "BASE",
            "flavor": "Cocoa",
            "price": 1500,
            "min_quantity": 10,
            "quantity_step": 10,
        },
    )


@pytest.fixture
def user(test_db) -> Dict[str, Any]:
    user_id = auth_service.create_user(
        test_db,
        email="buyer@example.com",
        password=TEST_PASSWORD,
        company_name="Gym Tokyo",
        last_name="Sato",
        first_name="Ken",
        phone="03-1234-5678",
    )
    return auth_service.get_user(test_db, user_id)


@pytest.fixture
def other_user(test_db) -> Dict[str, Any]:
    user_id = auth_service.create_user(
        test_db,
        email="other@example.com",
        password=TEST_PASSWORD,
        company_name="Studio Osaka",
        last_name="Tanaka",
        first_name="Yui",
        phone="06-1234-5678",
    )
    return auth_service.get_user(test_db, user_id)


@pytest.fixture
def address(test_db, user) -> Dict[str, Any]:
    return address_service.create_address(
        test_db,
        user["id"],
        {
            "label": "Head office",
            "postal_code": "150-0001",
            "address": "1-2-3 Jingumae, Shibuya, Tokyo",
            "phone": "03-1234-5678",
            "is_default": True,
        },
    )


@pytest.fixture
def admin(test_db) -> Dict[str, Any]:
    admin_id = test_db.insert(
        "INSERT INTO admin_users (username, password, created_at) VALUES (?, ?, ?)",
        [ADMIN_USERNAME, get_password_hash(ADMIN_PASSWORD), "2025-01-01 00:00:00"],
    )
    return {"id": admin_id, "username": ADMIN_USERNAME}


@pytest.fixture
def insert_order(test_db):
    """Insert order rows with explicit timestamps, for reporting tests"""

    def _insert(
        user_id: int,
        address_id: int,
        product_id: int,
        quantity: int,
        unit_price: int,
        created_at: str,
        status: str = "received",
    ) -> int:
        return test_db.insert(
            "INSERT INTO orders (user_id, product_id, shipping_address_id, quantity, unit_price, "
            "total_price, status, payment_confirmed, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                user_id,
                product_id,
                address_id,
                quantity,
                unit_price,
                quantity * unit_price,
                status,
                0,
                created_at,
            ],
        )

    return _insert


@pytest.fixture
def client(test_db, notifier) -> Generator[TestClient, None, None]:
    """TestClient wired to the test database; the lifespan is not entered"""
    from portal.core.limiter import limiter
    from portal.dependencies import get_db, get_notifier
    from portal.main import app

    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    limiter.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.reset()
