# storefront/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models.cart import CartModel
from storefront.domain.errors import CartItemNotFound, CartNotFound, InsufficientStock, InvalidQuantity
from storefront.repos.cart_repo import CartRepo
from storefront.services.inventory_ledger import InventoryLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


class CartService:
    """
    Koszyk przed zakupem.
    commands (add, update, remove, clear) modyfikuja stan
    query (get) tylko odczyt - ceny zawsze aktualne z produktu, nic nie zapisujemy

    Koszyk nie broni przed oversellingiem, ostatnia kontrola jest przy tworzeniu zamowienia.
    """

    def __init__(self, db: Session, ledger: InventoryLedger | None = None):
        self.db = db
        self.repo = CartRepo(db)
        self.ledger = ledger or InventoryLedger(db)

    #query - odczyt
    def get_cart(self, user_id: str) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            # koszyk powstaje dopiero przy pierwszym dodaniu
            return {"cart_id": None, "items": [], "item_count": 0, "total": Decimal("0.00")}

        lines = self.repo.get_lines_with_products(cart.id)
        items = []
        total = Decimal("0.00")

        for item, product in lines:
            item_total = (product.price * item.quantity).quantize(CENT)
            total += item_total
            items.append(
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "product": {
                        "name": product.name,
                        "price": product.price,
                        "stock": product.stock,
                        "images": product.images or [],
                        "sku": product.sku,
                        "is_active": product.is_active,
                    },
                    "item_total": item_total,
                }
            )

        return {
            "cart_id": cart.id,
            "items": items,
            "item_count": len(items),
            "total": total.quantize(CENT),
        }

    #commands
    def get_or_create_cart(self, user_id: str) -> str:
        with transaction(self.db):
            cart = self._get_or_create(user_id)
        return cart.id

    def add_item(self, user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidQuantity()

        with transaction(self.db):
            # produkt istnieje, aktywny i jest go co najmniej tyle ile dokladamy
            product = self.ledger.ensure_purchasable(product_id, quantity)

            cart = self._get_or_create(user_id)
            item = self.repo.get_cart_item(cart.id, product_id)
            created = False

            if not item:
                # rownolegly request mogl dodac ta sama pozycje pierwszy - wtedy dostajemy jego wiersz
                item, created = self.repo.insert_or_fetch_item(cart.id, product_id, quantity)

            if created:
                logger.info(f"Adding product {product_id} x{quantity} to cart {cart.id}")
            else:
                new_quantity = item.quantity + quantity
                if product.stock < new_quantity:
                    raise InsufficientStock(product.name, product.stock)

                logger.info(
                    f"Product {product_id} already in cart {cart.id}, "
                    f"quantity {item.quantity} -> {new_quantity}"
                )
                item.quantity = new_quantity

        return self.get_cart(user_id)

    def update_item(self, user_id: str, item_id: str, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidQuantity()

        with transaction(self.db):
            item = self.repo.get_owned_item(user_id, item_id)
            if not item:
                raise CartItemNotFound()

            # walidacja na nowa, absolutna ilosc
            self.ledger.ensure_purchasable(item.product_id, quantity)

            logger.info(f"Cart item {item_id} quantity {item.quantity} -> {quantity}")
            item.quantity = quantity

        return self.get_cart(user_id)

    def remove_item(self, user_id: str, item_id: str) -> Dict[str, Any]:
        with transaction(self.db):
            item = self.repo.get_owned_item(user_id, item_id)
            if not item:
                raise CartItemNotFound()

            self.repo.delete_cart_item(item)
            logger.info(f"Cart item {item_id} removed for user {user_id}")

        return self.get_cart(user_id)

    def clear_cart(self, user_id: str) -> Dict[str, Any]:
        with transaction(self.db):
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise CartNotFound()

            removed = self.repo.delete_all_items(cart.id)
            logger.info(f"Cart {cart.id} cleared ({removed} items)")

        return self.get_cart(user_id)

    def _get_or_create(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        cart = self.repo.insert_or_fetch_cart(user_id)
        logger.info(f"Cart {cart.id} ready for user {user_id}")
        return cart
