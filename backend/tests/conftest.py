import os
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Ensure required environment variables are present before settings import
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_ENABLED", "false")

# Add the backend directory so `salesboard` package imports resolve during tests
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.append(str(BACKEND_DIR))

from decimal import Decimal  # noqa: E402

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from salesboard.core import cache  # noqa: E402
from salesboard.core.security import get_password_hash, issue_access_token  # noqa: E402
from salesboard.models import (  # noqa: E402
    Account,
    AccountRevenue,
    Base,
    Manager,
    OriginalRelationship,
    Profile,
    RelationshipMap,
    Seller,
)

PASSWORD = "Str0ng!pass"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_cache():
    cache._memory_cache.clear()
    yield
    cache._memory_cache.clear()


@pytest.fixture(autouse=True)
def _no_rate_limits():
    from salesboard.core.rate_limit import limiter

    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
async def engine(anyio_backend):
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(session_factory):
    """Two managers with one seller each, plus a handful of accounts.

    * ``original``: in seller A's original snapshot, live as must_keep.
    * ``legacy``: seller A, stored with the legacy ``pinned`` status.
    * ``free``: no relationships at all, a perfect fit for seller A.
    * ``held_by_b``: must_keep for seller B.
    """

    admin = Profile(email="admin@example.com", name="Ada Admin", role="MASTER", password_hash=PASSWORD_HASH)
    mgr_a_user = Profile(email="mara@example.com", name="Mara Manager", role="MANAGER", password_hash=PASSWORD_HASH)
    mgr_b_user = Profile(email="ben@example.com", name="Ben Manager", role="MANAGER", password_hash=PASSWORD_HASH)

    async with session_factory() as s:
        s.add_all([admin, mgr_a_user, mgr_b_user])
        await s.flush()
        mgr_a = Manager(name="Mara Manager", user_id=mgr_a_user.id)
        mgr_b = Manager(name="Ben Manager", user_id=mgr_b_user.id)
        s.add_all([mgr_a, mgr_b])
        await s.flush()

        seller_a = Seller(
            name="Alice Seller",
            division="ESG",
            size="enterprise",
            industry_specialty="Tech",
            state="NY",
            country="USA",
            tenure_months=24,
            manager_id=mgr_a.id,
        )
        seller_b = Seller(
            name="Bob Seller",
            division="GVC",
            size="midmarket",
            industry_specialty="Retail",
            state="CA",
            country="USA",
            tenure_months=6,
            manager_id=mgr_b.id,
        )
        original = Account(name="Acme Original", current_division="ESG", size="enterprise", state="NY", country="USA", industry="Tech")
        legacy = Account(name="Legacy Pinned", current_division="ESG", size="midmarket", state="NJ", country="USA", industry="Finance")
        free = Account(name="Free Co", current_division="ESG", size="enterprise", state="NY", country="USA", industry="Tech")
        held_by_b = Account(name="Bravo Retail", current_division="GVC", size="midmarket", state="CA", country="USA", industry="Retail")
        s.add_all([seller_a, seller_b, original, legacy, free, held_by_b])
        await s.flush()

        s.add_all(
            [
                AccountRevenue(account_id=original.id, revenue_esg=Decimal("4000000"), revenue_gdt=Decimal("1000000")),
                AccountRevenue(account_id=legacy.id, revenue_esg=Decimal("1000000"), revenue_gdt=Decimal("500000")),
                AccountRevenue(account_id=free.id, revenue_gvc=Decimal("250000")),
                AccountRevenue(account_id=held_by_b.id, revenue_gvc=Decimal("2000000")),
                OriginalRelationship(seller_id=seller_a.id, account_id=original.id),
                RelationshipMap(seller_id=seller_a.id, account_id=original.id, status="must_keep"),
                RelationshipMap(
                    seller_id=seller_a.id,
                    account_id=legacy.id,
                    status="pinned",
                    pct_esg=Decimal("50"),
                    pct_gdt=Decimal("0"),
                ),
                RelationshipMap(seller_id=seller_b.id, account_id=held_by_b.id, status="must_keep"),
            ]
        )
        await s.commit()

    return SimpleNamespace(
        admin=admin,
        mgr_a_user=mgr_a_user,
        mgr_b_user=mgr_b_user,
        mgr_a=mgr_a,
        mgr_b=mgr_b,
        seller_a=seller_a,
        seller_b=seller_b,
        original=original,
        legacy=legacy,
        free=free,
        held_by_b=held_by_b,
    )


def auth_headers(profile: Profile) -> dict[str, str]:
    token = issue_access_token(profile.id, profile.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory):
    from salesboard.core.db import get_session
    from salesboard.main import app

    async def _session_override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def password():
    return PASSWORD
