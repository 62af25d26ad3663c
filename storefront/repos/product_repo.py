# storefront/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models._columns import utcnow


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products(self, product_ids: list[str]) -> dict[str, ProductModel]:
        if not product_ids:
            return {}
        rows = self.db.execute(
            select(ProductModel).where(ProductModel.id.in_(product_ids))
        ).scalars().all()
        return {p.id: p for p in rows}

    def read_stock(self, product_id: str) -> int | None:
        return self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def conditional_decrement(self, product_id: str, quantity: int) -> int:
        # UPDATE products SET stock = stock - q WHERE id = ? AND stock >= q
        # zwraca rowcount - 0 znaczy ze nie bylo dosc towaru (albo produktu)
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self._expire_cached(product_id)
        return result.rowcount

    def conditional_increment(self, product_id: str, quantity: int, max_stock: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock + quantity <= max_stock)
            .values(stock=ProductModel.stock + quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self._expire_cached(product_id)
        return result.rowcount

    def _expire_cached(self, product_id: str) -> None:
        # produkt w sesji ma stary stan po UPDATE w bazie
        cached = self.db.identity_map.get(self.db.identity_key(ProductModel, product_id))
        if cached is not None:
            self.db.expire(cached, ["stock", "updated_at"])

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product
