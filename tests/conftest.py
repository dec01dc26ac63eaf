import os

# Keep the app away from any real database or payment account during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["REVOLUT_SECRET_KEY"] = ""
os.environ["REVOLUT_PUBLIC_KEY"] = ""


import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import kitchen_shop.db as db
from kitchen_shop.main import app
from kitchen_shop.models import Base
from kitchen_shop.routes import limiter
from kitchen_shop.services.cart_sessions import clear_cache


def make_item(variant_id="fls-500", price="45.00", **overrides):
    """Build a cart item payload for a label bundle variant."""
    item = {
        "product_id": "food-label-system",
        "product_name": "Food Label System",
        "product_image": "/images/fls.png",
        "variant_id": variant_id,
        "variant_name": "500 labels",
        "price": price,
    }
    item.update(overrides)
    return item


def make_customer(**overrides):
    """Build a valid UK checkout customer payload."""
    customer = {
        "email": "chef@bakerskitchen.co.uk",
        "phone": "07400 123456",
        "first_name": "Sam",
        "last_name": "Baker",
        "company": "Baker's Kitchen Ltd",
        "address_line1": "1 High Street",
        "city": "London",
        "postcode": "SW1A 1AA",
        "country": "GB",
    }
    customer.update(overrides)
    return customer


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def customer_factory():
    return make_customer


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def clear_carts():
    """Every test starts with no carts in memory."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def client():
    """Shared FastAPI TestClient using an in-memory SQLite DB.

    Uses StaticPool so all connections share the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the db module used by the app (init_db runs on startup)
    original_engine = db.engine
    original_session_local = db.SessionLocal
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)

    # Override FastAPI DB dependency
    def override_get_db():
        db_sess = TestingSessionLocal()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as test_client:
        test_client.session_factory = TestingSessionLocal
        yield test_client

    app.dependency_overrides.clear()
    limiter.reset()

    db.engine = original_engine
    db.SessionLocal = original_session_local
