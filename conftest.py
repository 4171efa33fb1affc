import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EVENTS_ENABLED"] = "false"

import pytest
import asyncio
from decimal import Decimal
from itertools import count
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from dealerops.main import app
from dealerops.db.session import get_db, get_session_factory
from dealerops.models.base import Base
from dealerops.models.customer import Customer
from dealerops.models.lead import Lead
from dealerops.models.user import User
from dealerops.models.vehicle import Vehicle
from dealerops.core.security import create_access_token, hash_password
from dealerops.core.enums import LeadStatus, UserRole, VehicleStatus

TEST_PASSWORD = "secret123"

_vin_numbers = count(1)


def make_vin() -> str:
    return f"1HGCM82633A{next(_vin_numbers):06d}"


@pytest.fixture
async def session_factory(tmp_path):
    """A fresh file-backed SQLite database per test, wired into the app."""
    db_path = tmp_path / "dealerops_test.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        # SQLite leaves foreign keys unenforced unless asked
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestingSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal

    yield TestingSessionLocal

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture
async def test_client(session_factory):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def users(session_factory):
    """One user per role, plus a second salesperson, keyed by name."""
    roles = {
        "admin": UserRole.ADMIN,
        "manager": UserRole.MANAGER,
        "salesperson": UserRole.SALESPERSON,
        "salesperson_2": UserRole.SALESPERSON,
        "finance": UserRole.FINANCE,
        "service": UserRole.SERVICE,
    }
    password_hash = hash_password(TEST_PASSWORD)
    created = {}
    async with session_factory() as session:
        for username, role in roles.items():
            user = User(username=username, password_hash=password_hash, name=username.title(), role=role)
            session.add(user)
            created[username] = user
        await session.commit()
    return created


def auth_headers(user) -> dict:
    token = create_access_token(str(user.id), user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def admin_headers(users):
    return auth_headers(users["admin"])


@pytest.fixture
def manager_headers(users):
    return auth_headers(users["manager"])


@pytest.fixture
def salesperson_headers(users):
    return auth_headers(users["salesperson"])


@pytest.fixture
def finance_headers(users):
    return auth_headers(users["finance"])


@pytest.fixture
def service_headers(users):
    return auth_headers(users["service"])


@pytest.fixture
def create_customer_factory(session_factory):
    async def _create_customer(name="Jane Buyer", **kwargs):
        data = {
            "name": name,
            "email": f"{name.split()[0].lower()}@example.com",
            "phone": "555-0100",
        }
        data.update(kwargs)
        async with session_factory() as session:
            customer = Customer(**data)
            session.add(customer)
            await session.commit()
            return customer

    return _create_customer


@pytest.fixture
def create_vehicle_factory(session_factory):
    async def _create_vehicle(status=VehicleStatus.AVAILABLE, **kwargs):
        data = {
            "vin": make_vin(),
            "make": "Honda",
            "model": "Accord",
            "year": 2022,
            "color": "Blue",
            "price": Decimal("24000.00"),
            "mileage": 12000,
            "status": status,
        }
        data.update(kwargs)
        async with session_factory() as session:
            vehicle = Vehicle(**data)
            session.add(vehicle)
            await session.commit()
            return vehicle

    return _create_vehicle


@pytest.fixture
def create_lead_factory(session_factory, users):
    async def _create_lead(contact_name="Sam Prospect", **kwargs):
        data = {
            "lead_source": "website",
            "lead_status": LeadStatus.NEW,
            "contact_name": contact_name,
            "contact_phone": "555-0199",
            "contact_email": f"{contact_name.split()[0].lower()}@example.com",
            "vehicle_interested": "Honda Accord",
            "assigned_to": users["salesperson"].id,
        }
        data.update(kwargs)
        async with session_factory() as session:
            lead = Lead(**data)
            session.add(lead)
            await session.commit()
            return lead

    return _create_lead


@pytest.fixture
def fetch(session_factory):
    """Load a row in a fresh session, bypassing anything cached by the caller."""
    async def _fetch(model, item_id):
        async with session_factory() as session:
            return await session.get(model, item_id)

    return _fetch


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication and access policy"
    )
    config.addinivalue_line(
        "markers", "commission: marks tests related to commission calculations"
    )
    config.addinivalue_line(
        "markers", "lifecycle: marks tests related to sale and vehicle lifecycles"
    )
    config.addinivalue_line(
        "markers", "transactions: marks tests related to atomic sale operations"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to handle asyncio tests
    """
    for item in items:
        if asyncio.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)
