from datetime import datetime, timedelta

import fakeredis.aioredis
import pytest
from typing import AsyncGenerator, Callable, Dict
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from medidispense.main import app
from medidispense.infrastructure.database import get_db, init_db
from medidispense.infrastructure import redis as redis_infra
from medidispense.domain.inventory.service import InventoryService
from medidispense.domain.patients.service import PatientService
from medidispense.domain.prescriptions.models import Prescription, PrescriptionStatus

TAG = "A1B2C3D4"


@pytest.fixture(scope="function")
def redis_server() -> fakeredis.FakeServer:
    """In-memory Redis server shared by every client a test opens."""
    return fakeredis.FakeServer()


@pytest.fixture(scope="function", autouse=True)
async def redis_services(redis_server, monkeypatch):
    """Start the Redis-backed services against the in-memory server."""
    monkeypatch.setattr(
        redis_infra.redis, "from_url",
        lambda url, **kwargs: fakeredis.aioredis.FakeRedis(server=redis_server, decode_responses=True),
    )
    await redis_infra.init_redis_services("redis://test")
    yield redis_infra.get_lock_service()
    await redis_infra.close_redis_services()


@pytest.fixture(scope="function")
async def test_engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client; every request gets its own session, as in production."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def set_stock(db_session: AsyncSession) -> Callable:
    """Set stock (and optionally capacity) on the default slots by medicine order."""

    async def _set_stock(paracetamol: int, azithromycin: int, revital: int, capacity: int = 200):
        service = InventoryService(db_session)
        for position, stock in enumerate((paracetamol, azithromycin, revital), start=1):
            await service.update_slot(position, stock=stock, capacity=capacity)

    return _set_stock


@pytest.fixture(scope="function")
def stock_levels(db_session: AsyncSession) -> Callable:
    """Current stock per slot medicine, lower-cased."""

    async def _stock_levels() -> Dict[str, int]:
        inventory = await InventoryService(db_session).get_inventory()
        return {slot.medicine.lower(): slot.stock for slot in inventory.slots}

    return _stock_levels


@pytest.fixture(scope="function")
async def test_patient(db_session: AsyncSession):
    return await PatientService(db_session).register_patient(sample_patient())


def sample_patient(**overrides) -> dict:
    data = {
        "tag_id": TAG,
        "name": "John Doe",
        "age": 54,
        "gender": "Male",
        "condition": "Hypertension",
    }
    data.update(overrides)
    return data


def sample_prescription(**overrides) -> dict:
    data = {
        "paracetamol": 2,
        "azithromycin": 1,
        "revital": 0,
        "frequency": "Twice daily",
        "duration": "5 days",
    }
    data.update(overrides)
    return data


async def add_pending_pair(db_session: AsyncSession):
    """Two Pending rows for one tag, written directly as older data could be"""
    start = datetime(2024, 1, 1, 8, 0)
    older = Prescription(
        tag_id=TAG, paracetamol=1, frequency="Once daily", duration="3 days",
        status=PrescriptionStatus.PENDING, created_at=start,
    )
    newer = Prescription(
        tag_id=TAG, paracetamol=2, frequency="Twice daily", duration="5 days",
        status=PrescriptionStatus.PENDING, created_at=start + timedelta(hours=1),
    )
    db_session.add_all([newer, older])
    await db_session.commit()
    return older, newer


@pytest.fixture(scope="function")
def sample_patient_data() -> dict:
    """Sample patient payload for testing."""
    return sample_patient()


@pytest.fixture(scope="function")
def sample_prescription_data() -> dict:
    """Sample prescription payload (without tag) for testing."""
    return sample_prescription()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "prescriptions: mark test as prescription/dispense related"
    )
    config.addinivalue_line(
        "markers", "inventory: mark test as inventory administration related"
    )
    config.addinivalue_line(
        "markers", "patients: mark test as patient registry related"
    )
