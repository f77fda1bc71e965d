import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# This must be done BEFORE importing app.main so that settings and
# database.py pick up the throwaway SQLite database.
# ------------------------------------------------------------------
_DB_FILE = os.path.join(tempfile.gettempdir(), f"cca_allocation_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["ENV"] = "test"
os.environ.pop("PHASE_OVERRIDE", None)

from app.main import app
from app.core.database import AsyncSessionLocal, init_db, drop_db
from app.core.security import create_access_token
from app.models.cca import CCA, CCAAppointment, CCAPosition
from app.models.feature_flag import FeatureFlag
from app.models.user import User


@pytest_asyncio.fixture
async def database():
    await drop_db()
    await init_db()
    yield
    await drop_db()


@pytest_asyncio.fixture
async def db_session(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


# ------------------------------------------------------------------
# DATA HELPERS
# ------------------------------------------------------------------
@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token(subject=user.id)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_user(db_session):
    async def _make(name="Student", email=None, room=None):
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@hall.edu",
            password_hash="not-a-real-hash",
            room=room,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_cca(db_session):
    async def _make(name="Basketball", cca_type="sports"):
        cca = CCA(name=name, cca_type=cca_type)
        db_session.add(cca)
        await db_session.commit()
        await db_session.refresh(cca)
        return cca
    return _make


@pytest.fixture
def make_position(db_session):
    async def _make(cca, position_type, name=None, capacity=1):
        position = CCAPosition(
            cca_id=cca.id,
            name=name or position_type.title(),
            position_type=position_type,
            capacity=capacity,
        )
        db_session.add(position)
        await db_session.commit()
        await db_session.refresh(position)
        return position
    return _make


@pytest.fixture
def appoint(db_session):
    async def _appoint(user, position):
        appointment = CCAAppointment(user_id=user.id, position_id=position.id)
        db_session.add(appointment)
        await db_session.commit()
        return appointment
    return _appoint


@pytest.fixture
def activate_phase(db_session):
    """Inserts an active feature flag for each given phase name."""
    async def _activate(*names, hours=2):
        expires = datetime.now(timezone.utc) + timedelta(hours=hours)
        for name in names:
            db_session.add(FeatureFlag(name=name, expires_at=expires))
        await db_session.commit()
    return _activate
