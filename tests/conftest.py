import os

# Must be set before the app (and its settings) are imported
os.environ["ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["VAPID_PRIVATE_KEY"] = "test-vapid-private-key"
os.environ.pop("PAYMENT_WEBHOOK_SECRET", None)
os.environ.pop("PUBLIC_BASE_URL", None)

import pytest
from decimal import Decimal
from types import SimpleNamespace
from typing import Generator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from main import app
from core.constants import PAYMENT_PENDING
from core.database import Base, engine, SessionLocal
from models.users import User
from models.restaurants import Restaurant
from models.tables import Table
from models.menu_items import MenuItem
from models.orders import Order
from services.token_service import TokenService
from utils.codes import generate_track_code
from utils.deps import get_db
from utils.hashing import get_password_hash

# Background tasks open their own SessionLocal, so tests share the app's
# engine (and its test.db file) instead of creating a separate one.


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client that interacts with the app using the test database.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def _create_owner(session: Session, email: str, restaurant_name: str, slug: str, upi_id: str | None):
    user = User(
        email=email,
        hashed_password=get_password_hash("TestPassword123"),
        is_active=True,
        role="owner"
    )
    session.add(user)
    session.flush()

    restaurant = Restaurant(
        user_id=user.id,
        restaurant_name=restaurant_name,
        slug=slug,
        upi_id=upi_id
    )
    session.add(restaurant)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def owner(session):
    """Owner of 'Blue Cafe', with UPI payments configured."""
    return _create_owner(session, "owner@example.com", "Blue Cafe", "blue-cafe", "bluecafe@okicici")


@pytest.fixture
def restaurant(owner):
    return owner.restaurant


@pytest.fixture
def table(session, restaurant):
    table = Table(restaurant_id=restaurant.id, table_number="T-4")
    session.add(table)
    session.commit()
    session.refresh(table)
    return table


@pytest.fixture
def menu_item(session, restaurant):
    item = MenuItem(id=5, restaurant_id=restaurant.id, name="Masala Dosa", price=Decimal("12.99"))
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


@pytest.fixture
def auth_headers(owner):
    token = TokenService.create_access_token(owner.email, owner.id, owner.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_owner(session):
    """A second restaurant, used to check tenant isolation."""
    return _create_owner(session, "rival@example.com", "Rival Diner", "rival-diner", None)


@pytest.fixture
def other_auth_headers(other_owner):
    token = TokenService.create_access_token(other_owner.email, other_owner.id, other_owner.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def cart():
    return [{"id": 5, "price": 12.99, "quantity": 2}]


@pytest.fixture
def pending_order(session, restaurant, table, menu_item):
    """A prepaid order still waiting for its payment webhook."""
    order = Order(
        restaurant_id=restaurant.id,
        table_id=table.id,
        track_code=generate_track_code(),
        total_amount=Decimal("25.98"),
        status=PAYMENT_PENDING,
        is_prepaid=False,
        cart_data=[{"id": 5, "price": "12.99", "quantity": 2}]
    )
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


@pytest.fixture
def push_calls(monkeypatch):
    """
    Replaces the Web Push sender. Every call is recorded; endpoints listed in
    push_calls.failures raise the mapped exception instead of delivering.
    """
    calls = SimpleNamespace(sent=[], failures={})

    def fake_webpush(subscription_info, data, **kwargs):
        endpoint = subscription_info["endpoint"]
        calls.sent.append({"endpoint": endpoint, "data": data})
        if endpoint in calls.failures:
            raise calls.failures[endpoint]

    monkeypatch.setattr("services.notification_service.webpush", fake_webpush)
    return calls
