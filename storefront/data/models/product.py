from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, JSON, CheckConstraint

from storefront.data.database import Base
from storefront.data.models._columns import new_id, utcnow


class ProductModel(Base):
    """Produkt z katalogu. Core czyta cene/stan, stan zmienia tylko InventoryLedger."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    sku = Column(String(64), nullable=False, unique=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    images = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)
