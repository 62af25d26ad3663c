import threading
import uuid
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from storefront.data.database import Base, build_engine
from storefront.data.models.order import OrderModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import InsufficientStock
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService

from conftest import ADDRESS


@pytest.fixture
def file_sessions(tmp_path):
    # osobne polaczenia na watek - in-memory StaticPool by je wspoldzielil
    engine = build_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


def _prepare(Session, stock, buyers):
    db = Session()
    try:
        product = ProductModel(name="Last one", sku="SKU-LAST", price=Decimal("5.00"), stock=stock, images=[])
        db.add(product)
        db.commit()

        users = [str(uuid.uuid4()) for _ in range(buyers)]
        for user_id in users:
            CartService(db).add_item(user_id, product.id, 1)
        return product.id, users
    finally:
        db.close()


def _race(Session, users):
    barrier = threading.Barrier(len(users))
    created, rejected, unexpected = [], [], []

    def buy(user_id):
        db = Session()
        try:
            barrier.wait()
            created.append(OrderService(db).create_from_cart(user_id, ADDRESS, ADDRESS)["id"])
        except InsufficientStock:
            rejected.append(user_id)
        except Exception as e:  # noqa: BLE001
            unexpected.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=buy, args=(user_id,)) for user_id in users]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return created, rejected, unexpected


def _final_state(Session, product_id):
    db = Session()
    try:
        return db.get(ProductModel, product_id).stock, db.query(OrderModel).count()
    finally:
        db.close()


def test_two_buyers_for_last_unit(file_sessions):
    product_id, users = _prepare(file_sessions, stock=1, buyers=2)

    created, rejected, unexpected = _race(file_sessions, users)

    assert unexpected == []
    assert len(created) == 1
    assert len(rejected) == 1
    assert _final_state(file_sessions, product_id) == (0, 1)


def test_many_buyers_never_oversell(file_sessions):
    product_id, users = _prepare(file_sessions, stock=5, buyers=8)

    created, rejected, unexpected = _race(file_sessions, users)

    assert unexpected == []
    assert len(created) == 5
    assert len(rejected) == 3
    assert _final_state(file_sessions, product_id) == (0, 5)
