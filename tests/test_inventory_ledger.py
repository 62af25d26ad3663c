import pytest

from storefront.domain.errors import (
    InsufficientStock,
    InvalidQuantity,
    ProductInactive,
    ProductNotFound,
    ProductUnavailable,
    StockLimitExceeded,
)
from storefront.services.inventory_ledger import InventoryLedger

from conftest import stock_of


def test_decrement_reduces_stock(db, make_product):
    product = make_product(stock=5)
    ledger = InventoryLedger(db)

    ledger.decrement_stock(product.id, 3)
    db.commit()

    assert stock_of(db, product.id) == 2


def test_decrement_to_exactly_zero(db, make_product):
    product = make_product(stock=4)

    InventoryLedger(db).decrement_stock(product.id, 4)
    db.commit()

    assert stock_of(db, product.id) == 0


def test_decrement_more_than_available_leaves_stock_untouched(db, make_product):
    product = make_product(name="Lamp", stock=2)

    with pytest.raises(InsufficientStock) as exc:
        InventoryLedger(db).decrement_stock(product.id, 3)

    assert exc.value.available == 2
    assert '"Lamp"' in exc.value.message
    assert stock_of(db, product.id) == 2


def test_decrement_unknown_product(db):
    with pytest.raises(ProductNotFound):
        InventoryLedger(db).decrement_stock("00000000-0000-0000-0000-000000000000", 1)


@pytest.mark.parametrize("quantity", [0, -1])
def test_non_positive_quantity_rejected(db, make_product, quantity):
    product = make_product(stock=5)
    ledger = InventoryLedger(db)

    with pytest.raises(InvalidQuantity):
        ledger.decrement_stock(product.id, quantity)
    with pytest.raises(InvalidQuantity):
        ledger.increment_stock(product.id, quantity)


def test_increment_restores_stock(db, make_product):
    product = make_product(stock=1)

    InventoryLedger(db).increment_stock(product.id, 4)
    db.commit()

    assert stock_of(db, product.id) == 5


def test_increment_above_limit_rejected(db, make_product):
    product = make_product(stock=18)

    with pytest.raises(StockLimitExceeded):
        InventoryLedger(db, max_stock=20).increment_stock(product.id, 3)

    assert stock_of(db, product.id) == 18


def test_increment_unknown_product(db):
    with pytest.raises(ProductNotFound):
        InventoryLedger(db).increment_stock("00000000-0000-0000-0000-000000000000", 1)


def test_purchasable_checks(db, make_product):
    active = make_product(stock=3)
    inactive = make_product(stock=3, is_active=False)
    ledger = InventoryLedger(db)

    assert ledger.is_purchasable(active.id, 3)
    assert not ledger.is_purchasable(active.id, 4)
    assert not ledger.is_purchasable(inactive.id, 1)
    assert not ledger.is_purchasable("missing", 1)

    with pytest.raises(ProductInactive):
        ledger.ensure_purchasable(inactive.id, 1)
    # ProductInactive to szczegolny przypadek ProductUnavailable
    with pytest.raises(ProductUnavailable):
        ledger.ensure_purchasable(inactive.id, 1)
    with pytest.raises(InsufficientStock):
        ledger.ensure_purchasable(active.id, 4)
