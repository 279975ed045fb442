import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("ENV", "test")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from travelstore.database import get_session
from travelstore.main import app
from travelstore.models import Package, User, UserCoupon
from travelstore.utils.token import create_access_token


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def user(session):
    user = User(first_name="Asha", last_name="Rao", email="asha@example.com")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_user(session):
    user = User(first_name="Ravi", last_name="Kumar", email="ravi@example.com")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin(session):
    admin = User(first_name="Meera", last_name="Iyer", email="meera@example.com", role="admin")
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin


@pytest.fixture
def package(session):
    package = Package(
        title="Bali Escape",
        slug="bali-escape",
        destination="Bali",
        price=2000,
        original_price=2500,
        pricing={
            "with_flights": {"5": 15000},
            "without_flights": {"5": 10000, "3": 6000},
        },
    )
    session.add(package)
    session.commit()
    session.refresh(package)
    return package


@pytest.fixture
def make_coupon(session):
    def _make(owner, code="SAVE20", discount="20%", title="Summer Sale", expires_in_days=10, used=False):
        coupon = UserCoupon(
            user_id=owner.id,
            coupon_code=code,
            offer_title=title,
            discount=discount,
            expires_at=datetime.utcnow() + timedelta(days=expires_in_days),
            used=used,
        )
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon

    return _make


def auth_headers(user):
    token = create_access_token({"user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)
