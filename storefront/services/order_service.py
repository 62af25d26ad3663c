# storefront/services/order_service.py
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    CartEmpty,
    Forbidden,
    InsufficientStock,
    InvalidStatusTransition,
    OrderNotFound,
    OrderNumberConflict,
    ProductUnavailable,
)
from storefront.domain.status import OrderStatus
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.numbering import ORDER_PREFIX, generate_number
from storefront.utils.logging import get_logger
from storefront.utils.retry import unique_retry
from storefront.utils.settings import DEFAULT_PAGE_SIZE

logger = get_logger(__name__)

CENT = Decimal("0.01")
INITIAL_PAYMENT_STATUS = "PENDING"


@dataclass(frozen=True)
class OrderLine:
    """Pozycja do zamowienia z juz ustalona cena (snapshot)."""

    product_id: str
    quantity: int
    price: Decimal
    product: ProductModel | None = None


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.

    -checkout koszyka w jednej transakcji (walidacja, snapshot cen, zdjecie stanu, czyszczenie koszyka)
    -maszyna stanow zamowienia (domain/status.py)
    -anulowanie z oddaniem towaru na stan
    """

    def __init__(self, db: Session, ledger: InventoryLedger | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.ledger = ledger or InventoryLedger(db)

    def create_from_cart(
        self,
        user_id: str,
        shipping_address: Dict[str, Any],
        billing_address: Dict[str, Any],
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: Tworzenie zamowienia z koszyka.

        1. Pobiera pozycje koszyka z aktualnymi cenami/stanem produktow
        2. Pusty koszyk -> CartEmpty
        3. Produkt nieaktywny -> ProductUnavailable, za malo towaru -> InsufficientStock
        4. Total z cen odczytanych w kroku 1 (to jest snapshot na zawsze)
        5-7. Numer zamowienia, insert zamowienia + pozycji, zdjecie stanu
        8. Czysci koszyk
        Wszystko albo nic - dowolny blad to rollback calosci.
        """
        with transaction(self.db):
            cart = self.cart_repo.get_cart_by_user(user_id)
            lines = self.cart_repo.get_lines_with_products(cart.id) if cart else []

            if not lines:
                raise CartEmpty()

            order_lines = []
            for item, product in lines:
                if not product.is_active:
                    raise ProductUnavailable(product.name)

                if product.stock < item.quantity:
                    raise InsufficientStock(product.name, product.stock)

                order_lines.append(
                    OrderLine(
                        product_id=product.id,
                        quantity=item.quantity,
                        price=product.price,
                        product=product,
                    )
                )

            order = self.place_order(
                user_id=user_id,
                lines=order_lines,
                shipping_address=shipping_address,
                billing_address=billing_address,
                payment_method=payment_method,
                notes=notes,
            )

            self.cart_repo.delete_all_items(cart.id)

        logger.info(f"Order {order.order_number} created from cart {cart.id} (total {order.total})")
        return self.serialize(order)

    def place_order(
        self,
        user_id: str,
        lines: Sequence[OrderLine],
        shipping_address: Dict[str, Any],
        billing_address: Dict[str, Any],
        payment_method: str | None = None,
        notes: str | None = None,
        total: Decimal | None = None,
    ) -> OrderModel:
        """
        Zapisuje zamowienie z podanymi cenami i zdejmuje towar ze stanu.
        Bez commit - wywolujacy trzyma transakcje (checkout koszyka albo konwersja oferty).
        """
        if not lines:
            raise CartEmpty()

        if total is None:
            total = sum((line.price * line.quantity for line in lines), Decimal("0.00"))

        try:
            order = self._insert_order(
                user_id=user_id,
                status=OrderStatus.PENDING,
                total=Decimal(total).quantize(CENT),
                shipping_address=dict(shipping_address),
                billing_address=dict(billing_address),
                payment_method=payment_method,
                payment_status=INITIAL_PAYMENT_STATUS,
                notes=notes,
            )
        except IntegrityError as e:
            logger.error(f"Order number allocation failed: {e}")
            raise OrderNumberConflict("order") from e

        for line in lines:
            order.items.append(
                OrderItemModel(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.price,
                    product=line.product,
                )
            )
        self.db.flush()

        # stala kolejnosc blokowania wierszy produktow - bez deadlockow miedzy checkoutami
        for line in sorted(lines, key=lambda l: l.product_id):
            self.ledger.decrement_stock(line.product_id, line.quantity)

        return order

    @unique_retry()
    def _insert_order(self, **fields) -> OrderModel:
        # savepoint - kolizja numeru nie zabija calej transakcji
        with self.db.begin_nested():
            order = OrderModel(order_number=generate_number(ORDER_PREFIX), **fields)
            self.repo.add_order(order)
        return order

    def update_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        payment_status: str | None = None,
    ) -> Dict[str, Any]:
        new_status = OrderStatus(new_status)

        with transaction(self.db):
            order = self.repo.get_order_for_update(order_id)
            if not order:
                raise OrderNotFound()

            current = order.status
            if new_status != current:
                if not current.can_transition_to(new_status):
                    logger.warning(f"Order {order_id}: rejected transition {current.value} -> {new_status.value}")
                    raise InvalidStatusTransition("order", current.value, new_status.value)

                if new_status == OrderStatus.CANCELLED:
                    self._restore_stock(order)

                order.status = new_status

            if payment_status is not None:
                order.payment_status = payment_status

        logger.info(f"Order {order_id} status {current.value} -> {new_status.value}")
        return self.find_by_id(order_id)

    def cancel(self, order_id: str, user_id: str, is_admin: bool = False) -> Dict[str, Any]:
        with transaction(self.db):
            order = self.repo.get_order_for_update(order_id)
            if not order:
                raise OrderNotFound()

            if not is_admin and order.user_id != user_id:
                raise Forbidden("cancel this order")

            if not order.status.is_cancellable:
                logger.warning(f"Order {order_id}: cannot cancel in status {order.status.value}")
                raise InvalidStatusTransition("order", order.status.value, OrderStatus.CANCELLED.value)

            self._restore_stock(order)
            order.status = OrderStatus.CANCELLED

        logger.info(f"Order {order_id} cancelled by {'admin' if is_admin else 'owner'} {user_id}")
        return self.find_by_id(order_id)

    def _restore_stock(self, order: OrderModel) -> None:
        # akcja kompensujaca - oddajemy dokladnie to co zdjelismy
        items = self.repo.get_items(order.id)
        for item in sorted(items, key=lambda i: i.product_id):
            self.ledger.increment_stock(item.product_id, item.quantity)

    #query
    def find_all(
        self,
        user_id: str | None = None,
        status: OrderStatus | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        page = max(page, 1)
        limit = max(limit, 1)

        rows, total = self.repo.list_orders(
            user_id=user_id,
            status=OrderStatus(status) if status else None,
            offset=(page - 1) * limit,
            limit=limit,
        )

        orders = []
        for order, item_count in rows:
            data = self.serialize(order, with_items=False)
            data["item_count"] = int(item_count)
            orders.append(data)

        return {
            "orders": orders,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        }

    def find_by_id(self, order_id: str) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound()
        return self.serialize(order)

    def find_by_order_number(self, order_number: str) -> Dict[str, Any]:
        order = self.repo.get_by_number(order_number)
        if not order:
            raise OrderNotFound()
        return self.serialize(order)

    @staticmethod
    def serialize(order: OrderModel, with_items: bool = True) -> Dict[str, Any]:
        data = {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status,
            "total": order.total,
            "payment_method": order.payment_method,
            "payment_status": order.payment_status,
            "shipping_address": order.shipping_address,
            "billing_address": order.billing_address,
            "notes": order.notes,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }

        if with_items:
            items = [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": item.price,
                    "subtotal": (item.price * item.quantity).quantize(CENT),
                    "product": {
                        "name": item.product.name,
                        "sku": item.product.sku,
                        "images": item.product.images or [],
                    },
                }
                for item in order.items
            ]
            data["items"] = items
            data["item_count"] = len(items)

        return data
