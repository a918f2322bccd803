import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from retailpos.core.security import create_access_token, get_password_hash
from retailpos.db.base import Base
from retailpos.db.session import SessionLocal, engine, get_db
from retailpos.main import app
from retailpos.models import Branch, Customer, Product, User

PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def db():
    """Fresh schema and session for every test."""
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def seed(db):
    """One branch with an admin, a cashier, three products and a customer."""
    branch = Branch(name="Merkez")
    db.add(branch)
    db.flush()

    admin = User(
        email="admin@example.com",
        password_hash=PASSWORD_HASH,
        full_name="Yönetici",
        role="admin",
        branch_id=branch.id,
    )
    cashier = User(
        email="kasa@example.com",
        password_hash=PASSWORD_HASH,
        full_name="Kasiyer",
        role="cashier",
        branch_id=branch.id,
    )
    headphones = Product(
        name="Kulaklık",
        barcode="8690000000011",
        sale_price=Decimal("100.00"),
        purchase_price=Decimal("60.00"),
        vat_rate=Decimal("20"),
        vat_included=False,
        stock_quantity=10,
        min_stock_level=2,
    )
    tea = Product(
        name="Çay",
        barcode="8690000000028",
        sale_price=Decimal("50.00"),
        vat_rate=Decimal("0"),
        stock_quantity=100,
        min_stock_level=5,
    )
    bread = Product(
        name="Ekmek",
        barcode="8690000000035",
        sale_price=Decimal("10.00"),
        vat_rate=Decimal("1"),
        vat_included=True,
        stock_quantity=5,
        min_stock_level=10,
    )
    customer = Customer(name="Ahmet Yılmaz", phone="05550000000", credit_limit=Decimal("1000.00"))
    db.add_all([admin, cashier, headphones, tea, bread, customer])
    db.commit()

    return SimpleNamespace(
        branch=branch,
        admin=admin,
        cashier=cashier,
        headphones=headphones,
        tea=tea,
        bread=bread,
        customer=customer,
    )


@pytest.fixture
def other_branch(db, seed):
    """A second branch with its own manager and cashier."""
    branch = Branch(name="Kadıköy")
    db.add(branch)
    db.flush()

    cashier = User(
        email="kasa2@example.com",
        password_hash=PASSWORD_HASH,
        full_name="Kasiyer 2",
        role="cashier",
        branch_id=branch.id,
    )
    manager = User(
        email="mudur2@example.com",
        password_hash=PASSWORD_HASH,
        full_name="Müdür 2",
        role="manager",
        branch_id=branch.id,
    )
    db.add_all([cashier, manager])
    db.commit()

    return SimpleNamespace(branch=branch, cashier=cashier, manager=manager)


@pytest.fixture
def client(seed):
    """Test client running the app lifespan, with a session per request."""

    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(seed):
    return auth_headers(seed.admin)


@pytest.fixture
def cashier_headers(seed):
    return auth_headers(seed.cashier)


@pytest.fixture
def other_cashier_headers(other_branch):
    return auth_headers(other_branch.cashier)


@pytest.fixture
def other_manager_headers(other_branch):
    return auth_headers(other_branch.manager)
