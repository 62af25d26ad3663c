# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.database import SessionLocal, transaction
from storefront.data.models.product import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    {"name": "Wireless Mouse", "sku": "ACC-MOUSE-01", "price": Decimal("24.99"), "stock": 150},
    {"name": "Mechanical Keyboard", "sku": "ACC-KBD-01", "price": Decimal("89.00"), "stock": 60},
    {"name": "27\" Monitor", "sku": "DSP-27-01", "price": Decimal("249.50"), "stock": 25},
    {"name": "USB-C Dock", "sku": "ACC-DOCK-01", "price": Decimal("129.90"), "stock": 40},
    {"name": "Laptop Stand", "sku": "ACC-STAND-01", "price": Decimal("35.00"), "stock": 0},
]


def seed(db: Session) -> int:
    """Katalog demo - tylko gdy tabela produktow jest pusta. Zwraca liczbe dodanych."""
    if db.query(ProductModel.id).first():
        return 0

    with transaction(db):
        for entry in DEMO_PRODUCTS:
            db.add(ProductModel(images=[], **entry))

    logger.info(f"Seeded {len(DEMO_PRODUCTS)} products")
    return len(DEMO_PRODUCTS)


if __name__ == "__main__":
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
