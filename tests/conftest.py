import os

# Settings are read at import time by libs.db.config; point them at SQLite first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from contextlib import asynccontextmanager, contextmanager  # noqa: E402
from typing import AsyncGenerator, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from libs.auth.dependencies import get_current_user  # noqa: E402
from libs.auth.models import (  # noqa: E402
    AdminUser,
    AuthUser,
    CoachUser,
    ParticipantUser,
    PartnerUser,
)
from libs.common.config import get_settings  # noqa: E402
from libs.db.base import Base  # noqa: E402
from libs.db.session import get_async_db  # noqa: E402

# Import all models so metadata includes every table
from services.communications_service import models as _communications_models  # noqa: E402,F401
from services.enrollments_service import models as _enrollment_models  # noqa: E402,F401
from services.members_service import models as _member_models  # noqa: E402,F401
from services.orchestration_service import models as _orchestration_models  # noqa: E402,F401
from services.payments_service import models as _payment_models  # noqa: E402,F401
from services.sprints_service import models as _sprint_models  # noqa: E402,F401
from services.wallet_service import models as _wallet_models  # noqa: E402,F401

get_settings.cache_clear()
settings = get_settings()


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------


def make_coach_user(user_id: str = "coach-1", **kwargs) -> CoachUser:
    return CoachUser(sub=user_id, email=f"{user_id}@test.com", **kwargs)


def make_participant_user(user_id: str = "participant-1", **kwargs) -> ParticipantUser:
    return ParticipantUser(sub=user_id, email=f"{user_id}@test.com", **kwargs)


def make_partner_user(user_id: str = "partner-1", **kwargs) -> PartnerUser:
    return PartnerUser(sub=user_id, email=f"{user_id}@test.com", **kwargs)


def make_admin_user(user_id: str = "admin-1", **kwargs) -> AdminUser:
    return AdminUser(sub=user_id, email=f"{user_id}@test.com", **kwargs)


@contextmanager
def override_auth(app, user: AuthUser):
    """Temporarily authenticate every request to ``app`` as ``user``."""
    previous = app.dependency_overrides.get(get_current_user)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = previous


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory database per test. StaticPool keeps every connection on
    the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session configured like the application's session factory."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


# ---------------------------------------------------------------------------
# Service clients
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _service_client(app, db_session: AsyncSession, user: Optional[AuthUser]):
    async def _override_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _override_db
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def sprints_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.sprints_service.app.main import app

    async with _service_client(app, db_session, make_coach_user()) as ac:
        yield ac


@pytest_asyncio.fixture
async def orchestration_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.orchestration_service.app.main import app

    async with _service_client(app, db_session, make_admin_user()) as ac:
        yield ac


@pytest_asyncio.fixture
async def enrollments_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.enrollments_service.app.main import app

    async with _service_client(app, db_session, make_participant_user()) as ac:
        yield ac


@pytest_asyncio.fixture
async def wallet_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.wallet_service.app.main import app

    async with _service_client(app, db_session, make_participant_user()) as ac:
        yield ac


@pytest_asyncio.fixture
async def payments_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.payments_service.app.main import app

    async with _service_client(app, db_session, make_coach_user()) as ac:
        yield ac


@pytest_asyncio.fixture
async def members_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.members_service.app.main import app

    async with _service_client(app, db_session, make_participant_user()) as ac:
        yield ac


@pytest_asyncio.fixture
async def communications_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.communications_service.app.main import app

    async with _service_client(app, db_session, make_participant_user()) as ac:
        yield ac


@pytest.fixture
def webhook_headers() -> dict:
    return {"verif-hash": settings.FLW_SECRET_HASH}
