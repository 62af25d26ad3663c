# tests/conftest.py
import os

# przed importem storefront - modulowy engine nie moze probowac laczyc sie z postgresem
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import create_app
from storefront.data import models  # noqa: F401
from storefront.data.database import Base, build_engine, get_db
from storefront.data.models._columns import new_id
from storefront.data.models.product import ProductModel

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"
ADMIN_ID = "99999999-9999-9999-9999-999999999999"

ADDRESS = {
    "street": "Marszalkowska 1",
    "city": "Warszawa",
    "state": "Mazowieckie",
    "zip_code": "00-001",
    "country": "PL",
}


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_product(db):
    def _make(name="Widget", price="10.00", stock=10, is_active=True):
        product = ProductModel(
            name=name,
            sku=f"SKU-{new_id()[:8]}",
            price=Decimal(price),
            stock=stock,
            is_active=is_active,
            images=[],
        )
        db.add(product)
        db.commit()
        return product

    return _make


def stock_of(db, product_id):
    db.expire_all()
    return db.get(ProductModel, product_id).stock


@pytest.fixture
def client(db):
    app = create_app()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    return TestClient(app)


def headers(user_id=USER_ID, role="USER"):
    return {"X-User-Id": user_id, "X-User-Role": role}
