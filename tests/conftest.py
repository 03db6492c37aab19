"""Pytest fixtures for testing"""

import pytest
import pytest_asyncio
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, Iterable, Optional, Tuple
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from deposit_disposition.api.dependencies import get_clock
from deposit_disposition.api.main import create_app
from deposit_disposition.domain.models import DamageItem
from deposit_disposition.infrastructure.database.models import Base, Inspection, InspectionItem, Lease
from deposit_disposition.infrastructure.database.repositories import SqlAlchemyDispositionStore
from deposit_disposition.infrastructure.database.session import get_db
from deposit_disposition.services.disposition_service import DispositionService


# Test database: one in-memory SQLite per test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Deposit held exactly 365 days: $1000 at 1% accrues $10.00
DEPOSIT_PAID = date(2023, 1, 10)
MOVE_OUT = date(2024, 1, 10)
DEADLINE = date(2024, 1, 31)
TODAY = date(2024, 1, 20)

ItemRow = Tuple[str, str, str, bool]  # room, item, condition, has_damage


class FixedClock:
    """Clock the tests can move forward"""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


def make_damage_item(**overrides) -> DamageItem:
    """Damage item with sensible defaults for pure domain tests"""
    defaults = dict(
        id="dmg-1",
        inspection_id="insp-out",
        description="Hole in drywall",
        repair_cost_cents=20000,
        location="Living room",
        is_normal_wear=False,
        is_pre_existing=False,
    )
    defaults.update(overrides)
    return DamageItem(**defaults)


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Create test database and session"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def service(db: AsyncSession, clock: FixedClock) -> DispositionService:
    return DispositionService(SqlAlchemyDispositionStore(db), clock=clock)


@pytest.fixture
def make_lease(db: AsyncSession):
    """Insert a lease with deposit terms; returns its id"""

    async def _make_lease(
        deposit_cents: int = 100000,
        start_date: date = DEPOSIT_PAID,
        paid_date: Optional[date] = DEPOSIT_PAID,
        interest_rate: Optional[Decimal] = Decimal("0.01"),
        bank_name: Optional[str] = "First State Bank",
        account_last4: Optional[str] = "4321",
        status: str = "ACTIVE",
        move_out_date: Optional[date] = None,
    ) -> str:
        lease = Lease(
            status=status,
            move_out_date=move_out_date,
            start_date=start_date,
            security_deposit_cents=deposit_cents,
            deposit_paid_date=paid_date,
            deposit_interest_rate=interest_rate,
            deposit_bank_name=bank_name,
            deposit_account_last4=account_last4,
        )
        db.add(lease)
        await db.commit()
        return lease.id

    return _make_lease


@pytest.fixture
def make_inspection(db: AsyncSession):
    """Insert an inspection with condition items; returns its id"""

    async def _make_inspection(lease_id: str, inspection_type: str, items: Iterable[ItemRow] = ()) -> str:
        inspection = Inspection(lease_id=lease_id, type=inspection_type)
        db.add(inspection)
        await db.flush()
        for room, item, condition, has_damage in items:
            db.add(
                InspectionItem(
                    inspection_id=inspection.id,
                    room=room,
                    item=item,
                    condition=condition,
                    has_damage=has_damage,
                )
            )
        await db.commit()
        return inspection.id

    return _make_inspection


@pytest_asyncio.fixture
async def client(db: AsyncSession, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client with test database and fixed clock"""
    app = create_app()

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
