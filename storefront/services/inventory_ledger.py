# storefront/services/inventory_ledger.py
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    InsufficientStock,
    InvalidQuantity,
    ProductInactive,
    ProductNotFound,
    StockLimitExceeded,
)
from storefront.repos.product_repo import ProductRepo
from storefront.utils.settings import MAX_STOCK
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    """
    Jedyne miejsce gdzie zmienia sie stan magazynu.

    -decrement: atomowy warunkowy UPDATE (stock >= qty w WHERE), bez osobnego SELECT
    -increment: zwrot towaru przy anulowaniu
    -is_purchasable / ensure_purchasable: tylko odczyt, walidacja przed transakcja

    Nie robi commit - dziala w transakcji wywolujacego.
    """

    def __init__(self, db: Session, max_stock: int = MAX_STOCK):
        self.repo = ProductRepo(db)
        self.max_stock = max_stock

    def get_product(self, product_id: str) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product

    def is_purchasable(self, product_id: str, quantity: int) -> bool:
        product = self.repo.get_product(product_id)
        return bool(product and product.is_active and product.stock >= quantity)

    def ensure_purchasable(self, product_id: str, quantity: int) -> ProductModel:
        product = self.get_product(product_id)

        if not product.is_active:
            raise ProductInactive(product.name)

        if product.stock < quantity:
            raise InsufficientStock(product.name, product.stock)

        return product

    def decrement_stock(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidQuantity()

        rowcount = self.repo.conditional_decrement(product_id, quantity)

        if rowcount == 0:
            # UPDATE nic nie zmienil - sprawdzamy czemu (tylko do komunikatu)
            product = self.repo.get_product(product_id)
            if not product:
                raise ProductNotFound(product_id)
            logger.warning(
                f"Stock decrement rejected for product {product_id}: "
                f"requested {quantity}, available {product.stock}"
            )
            raise InsufficientStock(product.name, product.stock)

        logger.info(f"Stock of product {product_id} decremented by {quantity}")

    def increment_stock(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidQuantity()

        rowcount = self.repo.conditional_increment(product_id, quantity, self.max_stock)

        if rowcount == 0:
            if not self.repo.get_product(product_id):
                raise ProductNotFound(product_id)
            raise StockLimitExceeded(product_id)

        logger.info(f"Stock of product {product_id} incremented by {quantity}")
