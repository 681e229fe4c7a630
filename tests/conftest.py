"""
Pytest configuration - shared fixtures.

Settings are read once at import time, so the environment is prepared before
anything from ``storefront`` is imported.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("APP_DEBUG", "false")

from typing import Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.infrastructure.database import Base, get_db
from storefront.infrastructure.google_oauth import GoogleIdentity
from storefront.interfaces.deps import get_google_client, get_sms_client
from storefront.main import app
from storefront.domain.models.address import Postcode
from storefront.domain.models.product import Brand, Category, Product
from storefront.domain.models.user import CUSTOMER_ROLE, User


class FakeGoogleClient:
    """Google token-info stand-in: tokens map to identities."""

    def __init__(self):
        self.identities: Dict[str, GoogleIdentity] = {}
        self.revoked = []

    def register(self, token: str, email: str, name: str = "Asha", subject: str = "sub-1", picture=None):
        self.identities[token] = GoogleIdentity(subject=subject, email=email, name=name, picture=picture)

    def verify_id_token(self, token: Optional[str]) -> Optional[GoogleIdentity]:
        return self.identities.get(token)

    def revoke_token(self, token: Optional[str]) -> bool:
        self.revoked.append(token)
        return True


class FakeSmsClient:
    def __init__(self):
        self.sent = []

    def send_otp(self, phone: str, code: str):
        self.sent.append((phone, code))
        return {"return": True, "message": ["SMS sent successfully."]}

    def last_code(self, phone: str) -> str:
        return [code for number, code in self.sent if number == phone][-1]


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def google() -> FakeGoogleClient:
    return FakeGoogleClient()


@pytest.fixture
def sms() -> FakeSmsClient:
    return FakeSmsClient()


@pytest.fixture
def client(db_session, google, sms) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_google_client] = lambda: google
    app.dependency_overrides[get_sms_client] = lambda: sms
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# -- factories -------------------------------------------------------------


def make_user(db: Session, **fields) -> User:
    fields.setdefault("name", "User")
    fields.setdefault("role", CUSTOMER_ROLE)
    user = User(**fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_postcode(db: Session, code: str = "560001", city: str = "Bengaluru") -> Postcode:
    postcode = Postcode(code=code, city=city, district="Bengaluru Urban", state="Karnataka", country="India")
    db.add(postcode)
    db.commit()
    db.refresh(postcode)
    return postcode


def make_product(
    db: Session,
    name: str,
    retail_price: float,
    current_price: float,
    brand: Optional[Brand] = None,
    category: Optional[Category] = None,
    **fields,
) -> Product:
    product = Product(
        name=name,
        retail_price=retail_price,
        current_price=current_price,
        purchase_price=fields.pop("purchase_price", current_price * 0.8),
        brand=brand,
        category=category,
        **fields,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_brand(db: Session, name: str) -> Brand:
    brand = Brand(name=name)
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return brand


def make_category(db: Session, name: str) -> Category:
    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def sign_in_guest(client: TestClient, guest: int = 12345) -> Dict[str, str]:
    """Sign a new guest in and return the headers of its session."""
    response = client.post("/api/auth/in", headers={"x-account-type": "guest"}, json={"guest": guest})
    assert response.status_code == 200, response.text
    user = response.json()["body"]["user"]
    return {"x-account-type": "guest", "o-auth-token": user["o-auth-token"]}


def sign_in_phone(client: TestClient, sms: FakeSmsClient, phone: str = "9876543210") -> Dict[str, str]:
    """Request a code, sign in with it and return the session headers."""
    assert client.post("/api/auth/verify", json={"phone": phone}).status_code == 200
    response = client.post(
        "/api/auth/in",
        headers={"x-account-type": "phone"},
        json={"phone": phone, "x-verification-code": int(sms.last_code(phone))},
    )
    assert response.status_code == 200, response.text
    user = response.json()["body"]["user"]
    return {"x-account-type": "phone", "o-auth-token": user["o-auth-token"]}
