"""
Pytest fixtures for the billing ledger test suite.

Provides:
- A temporary JSON entity store with the default categories seeded
- A fixed clock shared by every service
- Ledger, Reports and the other services wired to that store
- Factories for clients, contracts and projects
- A FastAPI TestClient with dependency overrides and a logged-in admin
"""
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.core.clock import FixedClock
from app.db.session import get_store
from app.db.store import JsonFileStore
from app.main import app
from app.models.user import UserRole
from app.schemas.client import ClientCreate
from app.schemas.contract import ContractCreate
from app.schemas.project import ProjectCreate
from app.schemas.time_entry import TimeEntryCreate
from app.schemas.user import UserCreate
from app.services.categories import CategoryService
from app.services.clients import ClientService
from app.services.ledger import Ledger
from app.services.reports import Reports
from app.services.sessions import InMemorySessionStore
from app.services.users import UserService

ADMIN_PASSWORD = "admin-secret"


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store(tmp_path, clock):
    store = JsonFileStore(str(tmp_path / "data"))
    CategoryService(store, clock).seed_defaults()
    return store


@pytest.fixture
def ledger(store, clock):
    return Ledger(store, clock)


@pytest.fixture
def reports(store):
    return Reports(store)


@pytest.fixture
def client_service(store, clock):
    return ClientService(store, clock)


@pytest.fixture
def category_service(store, clock):
    return CategoryService(store, clock)


@pytest.fixture
def user_service(store, clock):
    return UserService(store, clock)


@pytest.fixture
def customer(client_service):
    """A billed client."""
    return client_service.create(ClientCreate(name="Acme Corp", email="billing@acme.example.com", company="Acme"))


@pytest.fixture
def make_contract(ledger, customer):
    counter = {"n": 0}

    def _make(total_hours="10", hourly_rate="50", **overrides):
        counter["n"] += 1
        fields = dict(
            client_id=customer.id,
            contract_number=f"C-{counter['n']:03d}",
            description="Support retainer",
            total_hours=Decimal(total_hours),
            hourly_rate=Decimal(hourly_rate),
            start_date=date(2024, 1, 1),
        )
        fields.update(overrides)
        return ledger.create_contract(ContractCreate(**fields))

    return _make


@pytest.fixture
def make_independent_project(ledger):
    def _make(hourly_rate="40", estimated_hours="20", **overrides):
        fields = dict(
            name="Website rebuild",
            description="Fixed-rate side project",
            is_independent=True,
            client_name="Walk-in customer",
            hourly_rate=Decimal(hourly_rate),
            estimated_hours=Decimal(estimated_hours),
        )
        fields.update(overrides)
        return ledger.create_project(ProjectCreate(**fields))

    return _make


@pytest.fixture
def entry_for():
    """Build a TimeEntryCreate with sensible defaults."""
    def _entry(hours, contract_id=None, project_id=None, entry_date=date(2024, 3, 15), **overrides):
        fields = dict(
            contract_id=contract_id,
            project_id=project_id,
            description="Work session",
            hours_used=Decimal(str(hours)),
            entry_date=entry_date,
        )
        fields.update(overrides)
        return TimeEntryCreate(**fields)

    return _entry


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

@pytest.fixture
def session_store(clock):
    return InMemorySessionStore(clock)


@pytest.fixture
def app_client(store, clock, session_store):
    """Unauthenticated TestClient bound to the temporary store."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_session_store] = lambda: session_store
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def login(app_client, user_service):
    """Create a user with ``role`` and return auth headers for it."""
    def _login(username="admin", role=UserRole.ADMIN, password=ADMIN_PASSWORD):
        user_service.create(UserCreate(
            username=username,
            email=f"{username}@example.com",
            password=password,
            full_name=username.title(),
            role=role,
        ))
        response = app_client.post("/api/auth/login", data={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['sessionId']}"}

    return _login


@pytest.fixture
def admin_headers(login):
    return login()
