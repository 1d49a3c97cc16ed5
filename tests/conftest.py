"""
Shared fixtures: in-memory database, cache, fake payment gateway and API client.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.cache import RedisCache
from app.core.database import get_db
from app.core.exceptions import PaymentGatewayException
from app.core.security import SecurityUtils
from app.models import Base, Coupon, Product, ProductCategory, User, UserRole
from app.services.payment_gateway import GatewaySession, LineItem
from app.utils.helpers import round_money, utcnow

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeGateway:
    """Payment gateway double that keeps sessions in memory."""

    def __init__(self):
        self.sessions: Dict[str, GatewaySession] = {}
        self.amounts: Dict[str, Decimal] = {}
        self.line_items: Dict[str, List[LineItem]] = {}
        self.retrievals = 0

    async def create_session(self, line_items, success_url, cancel_url, metadata):
        session_id = f"plink_test_{len(self.sessions) + 1}"
        self.amounts[session_id] = sum((round_money(item.amount) for item in line_items), Decimal("0"))
        self.line_items[session_id] = list(line_items)
        self.sessions[session_id] = GatewaySession(
            id=session_id,
            url=f"https://pay.test/{session_id}",
            payment_status="unpaid",
            amount_total=Decimal("0.00"),
            metadata=dict(metadata),
        )
        return self.sessions[session_id]

    async def retrieve_session(self, session_id):
        self.retrievals += 1
        if session_id not in self.sessions:
            raise PaymentGatewayException("Payment gateway error: link not found")
        return self.sessions[session_id]

    def mark_paid(self, session_id: str, amount: Optional[Decimal] = None) -> None:
        session = self.sessions[session_id]
        session.payment_status = "paid"
        session.amount_total = amount if amount is not None else self.amounts[session_id]


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache():
    """Cache running on its in-memory fallback (never connected to Redis)."""
    return RedisCache(url="redis://unused")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    async def _make_user(role: UserRole = UserRole.CUSTOMER, email: Optional[str] = None) -> User:
        counter["n"] += 1
        user = User(
            full_name=f"User {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            password_hash=SecurityUtils.hash_password("Secret123"),
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_product(db_session):
    async def _make_product(
        name: str = "Headphones",
        price: str = "125.00",
        category: ProductCategory = ProductCategory.ELECTRONICS,
        is_featured: bool = False,
        stock: int = 10,
    ) -> Product:
        product = Product(
            name=name,
            description=f"{name} description",
            category=category,
            price=Decimal(price),
            stock=stock,
            image=f"https://img.test/{name.lower()}.jpg",
            is_featured=is_featured,
        )
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _make_product


@pytest.fixture
def make_coupon(db_session):
    """Insert a coupon directly, bypassing service-level checks."""

    async def _make_coupon(
        user: User,
        code: str = "SAVE20",
        discount_percentage: str = "20",
        expires_in: timedelta = timedelta(days=30),
        usage_limit: Optional[int] = None,
        used_count: int = 0,
        minimum_purchase: str = "0",
        is_active: bool = True,
    ) -> Coupon:
        coupon = Coupon(
            code=code,
            user_id=user.id,
            discount_percentage=Decimal(discount_percentage),
            expiration_date=utcnow() + expires_in,
            usage_limit=usage_limit,
            used_count=used_count,
            minimum_purchase=Decimal(minimum_purchase),
            is_active=is_active,
        )
        db_session.add(coupon)
        await db_session.commit()
        await db_session.refresh(coupon)
        return coupon

    return _make_coupon


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> Dict[str, str]:
        token = SecurityUtils.create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
async def client(session_factory, cache, gateway):
    """HTTP client bound to the app with the test database, cache and gateway."""
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.cache = cache
    app.state.payment_gateway = gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
