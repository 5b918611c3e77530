import os
import secrets
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure project root on sys.path so 'app' package resolves without installation
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.main import app  # type: ignore
from app.database import Base  # type: ignore
from app.api import deps  # type: ignore
"""Pytest fixtures and factories.

All model modules are imported (via app.models.db) before
Base.metadata.create_all() so every table exists.
"""
from app.models.db import User, AdminShop, AgentShop, RevenueSnapshot
from app.models.db.enums import UserRole, PaymentStatus

SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///./test_revenue.db"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def create_test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    try:
        os.remove("test_revenue.db")
    except OSError:
        pass

@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(autouse=True)
def _isolate_test_state(db_session):
    """Each test starts with no shops and no snapshots (users are kept)."""
    for model in (RevenueSnapshot, AgentShop, AdminShop):
        db_session.query(model).delete()
    db_session.commit()
    yield

# Override dependency
def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

app.dependency_overrides[deps.get_db] = _override_get_db

@pytest.fixture()
def client():
    return TestClient(app)

# ---------- Data factory helpers ----------

def utc_days_ago(days: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)

@pytest.fixture()
def user_factory(db_session):
    def _create(role: UserRole = UserRole.ADMIN, *, is_active: bool = True):
        token = secrets.token_hex(4)
        user = User(
            name=f"{role.value.title()} {token}",
            email=f"{role.value.lower()}_{token}@example.com",
            api_key=f"key_{secrets.token_hex(12)}",
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create

@pytest.fixture()
def admin_headers(user_factory):
    admin = user_factory(UserRole.ADMIN)
    return {"Authorization": f"Bearer {admin.api_key}"}

@pytest.fixture()
def admin_shop_factory(db_session):
    def _create(
        *,
        plan_type: str | None = "BASIC",
        plan_amount: float | None = None,
        paid_days_ago: float | None = 0,
        expires_in_days: float | None = 300,
        district: str | None = None,
        city: str | None = None,
        full_address: str = "",
        area: str | None = None,
        created_days_ago: float = 30,
    ):
        shop = AdminShop(
            shop_name=f"Admin Shop {secrets.token_hex(2)}",
            plan_type=plan_type,
            plan_amount=plan_amount,
            last_payment_date=utc_days_ago(paid_days_ago) if paid_days_ago is not None else None,
            payment_expiry_date=utc_days_ago(-expires_in_days) if expires_in_days is not None else None,
            district=district,
            city=city,
            full_address=full_address,
            area=area,
            created_at=utc_days_ago(created_days_ago),
        )
        db_session.add(shop)
        db_session.commit()
        db_session.refresh(shop)
        return shop
    return _create

@pytest.fixture()
def agent_shop_factory(db_session):
    def _create(
        *,
        plan_type: str | None = "BASIC",
        plan_amount: float | None = None,
        payment_status: str = PaymentStatus.PAID.value,
        agent_commission: float | None = None,
        paid_days_ago: float | None = 0,
        expires_in_days: float | None = 300,
        district: str | None = None,
        city: str | None = None,
        address: str = "",
        area: str | None = None,
        created_days_ago: float = 30,
    ):
        shop = AgentShop(
            shop_name=f"Agent Shop {secrets.token_hex(2)}",
            plan_type=plan_type,
            plan_amount=plan_amount,
            payment_status=payment_status,
            agent_commission=agent_commission,
            last_payment_date=utc_days_ago(paid_days_ago) if paid_days_ago is not None else None,
            payment_expiry_date=utc_days_ago(-expires_in_days) if expires_in_days is not None else None,
            district=district,
            city=city,
            address=address,
            area=area,
            created_at=utc_days_ago(created_days_ago),
        )
        db_session.add(shop)
        db_session.commit()
        db_session.refresh(shop)
        return shop
    return _create
