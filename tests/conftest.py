from __future__ import annotations

import os

os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("LOG_FILE", "")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from storefront.main import app  # noqa: E402
from storefront.db import Base, get_db  # noqa: E402
from storefront.auth.models import Admin  # noqa: E402
from storefront.auth.passwords import hash_password  # noqa: E402
from storefront.auth.tokens import issue_token  # noqa: E402
from storefront.catalog.models import Category, Product, Promo  # noqa: E402

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_admin(db):
    """Admins created in call order get increasing created_at values."""
    counter = {"n": 0}

    def _make(username: str = "admin", password: str = "secret123", **kw) -> Admin:
        counter["n"] += 1
        kw.setdefault("created_at", T0 + timedelta(minutes=counter["n"]))
        kw.setdefault("role", "super_admin")
        a = Admin(username=username, password_hash=hash_password(password), **kw)
        db.add(a)
        db.commit()
        db.refresh(a)
        return a

    return _make


@pytest.fixture
def admin(make_admin) -> Admin:
    return make_admin()


@pytest.fixture
def auth_headers(admin) -> dict:
    return {"Authorization": f"Bearer {issue_token(admin.id, admin.username)}"}


@pytest.fixture
def category(db) -> Category:
    c = Category(name="Tas Wanita", slug="tas-wanita", description="")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture
def make_product(db, category):
    def _make(slug: str = "tote-bag", price: int = 100000, **kw) -> Product:
        kw.setdefault("name", slug.replace("-", " ").title())
        kw.setdefault("sku", slug.upper())
        kw.setdefault("description", "A bag")
        kw.setdefault("images", ["https://cdn.example.com/a.jpg"])
        p = Product(slug=slug, price=price, category_id=category.id, **kw)
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


@pytest.fixture
def make_promo(db):
    def _make(slug: str = "promo", type: str = "percentage", value: float = 20, **kw) -> Promo:
        now = datetime.now(timezone.utc)
        kw.setdefault("title", slug)
        kw.setdefault("start_date", now - timedelta(days=1))
        kw.setdefault("end_date", now + timedelta(days=1))
        kw.setdefault("is_active", True)
        p = Promo(slug=slug, type=type, value=value, **kw)
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make
