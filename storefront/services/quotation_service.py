# storefront/services/quotation_service.py
import math
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.database import transaction
from storefront.data.models._columns import as_utc, utcnow
from storefront.data.models.quotation import QuotationModel
from storefront.data.models.quotation_item import QuotationItemModel
from storefront.domain.errors import (
    Forbidden,
    InsufficientStock,
    InvalidQuantity,
    InvalidStatusTransition,
    ItemsRequired,
    OrderNumberConflict,
    ProductUnavailable,
    QuotationExpired,
    QuotationNotApproved,
    QuotationNotFound,
    QuotationNotPending,
)
from storefront.domain.status import ADMIN_QUOTATION_STATUSES, QuotationStatus
from storefront.repos.quotation_repo import QuotationRepo
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.numbering import QUOTATION_PREFIX, generate_number
from storefront.services.order_service import OrderLine, OrderService
from storefront.utils.logging import get_logger
from storefront.utils.retry import unique_retry
from storefront.utils.settings import DEFAULT_PAGE_SIZE

logger = get_logger(__name__)

CENT = Decimal("0.01")


class QuotationService:
    """
    Oferty cenowe - cena zamrozona w chwili tworzenia, bez rezerwacji towaru.
    Zatwierdzona i wazna oferta moze byc raz zamieniona na zamowienie (po cenach z oferty).
    """

    def __init__(
        self,
        db: Session,
        ledger: InventoryLedger | None = None,
        orders: OrderService | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.repo = QuotationRepo(db)
        self.ledger = ledger or InventoryLedger(db)
        self.orders = orders or OrderService(db, ledger=self.ledger)
        self.clock = clock

    def create(
        self,
        user_id: str,
        items: Sequence[Dict[str, Any]],
        valid_until: datetime,
        notes: str | None = None,
        customer_notes: str | None = None,
    ) -> Dict[str, Any]:
        if not items:
            raise ItemsRequired()

        with transaction(self.db):
            lines = []
            total = Decimal("0.00")

            for entry in items:
                quantity = int(entry["quantity"])
                if quantity <= 0:
                    raise InvalidQuantity()

                product = self.ledger.get_product(str(entry["product_id"]))
                if not product.is_active:
                    raise ProductUnavailable(product.name)

                # stan NIE jest sprawdzany ani rezerwowany - to tylko wycena
                lines.append((product, quantity, product.price))
                total += product.price * quantity

            try:
                quotation = self._insert_quotation(
                    user_id=user_id,
                    status=QuotationStatus.PENDING,
                    total=total.quantize(CENT),
                    valid_until=as_utc(valid_until),
                    notes=notes,
                    customer_notes=customer_notes,
                )
            except IntegrityError as e:
                logger.error(f"Quotation number allocation failed: {e}")
                raise OrderNumberConflict("quotation") from e

            for product, quantity, price in lines:
                quotation.items.append(
                    QuotationItemModel(
                        product_id=product.id,
                        quantity=quantity,
                        price=price,
                        product=product,
                    )
                )
            self.db.flush()

        logger.info(
            f"Quotation {quotation.quotation_number} created for user {user_id} "
            f"({len(lines)} items, total {quotation.total})"
        )
        return self.serialize(quotation)

    @unique_retry()
    def _insert_quotation(self, **fields) -> QuotationModel:
        with self.db.begin_nested():
            quotation = QuotationModel(quotation_number=generate_number(QUOTATION_PREFIX), **fields)
            self.repo.add_quotation(quotation)
        return quotation

    def update_status(
        self,
        quotation_id: str,
        status: QuotationStatus,
        notes: str | None = None,
    ) -> Dict[str, Any]:
        status = QuotationStatus(status)

        with transaction(self.db):
            quotation = self.repo.get_quotation_for_update(quotation_id)
            if not quotation:
                raise QuotationNotFound()

            current = quotation.status
            if status != current:
                # CONVERTED ustawia tylko konwersja
                if status not in ADMIN_QUOTATION_STATUSES or not current.can_transition_to(status):
                    logger.warning(
                        f"Quotation {quotation_id}: rejected transition {current.value} -> {status.value}"
                    )
                    raise InvalidStatusTransition("quotation", current.value, status.value)
                quotation.status = status

            if notes is not None:
                quotation.notes = notes

        logger.info(f"Quotation {quotation_id} status {current.value} -> {status.value}")
        return self.serialize(quotation)

    def convert_to_order(
        self,
        quotation_id: str,
        user_id: str,
        shipping_address: Dict[str, Any],
        billing_address: Dict[str, Any],
    ) -> Dict[str, Any]:
        with transaction(self.db):
            quotation = self.repo.get_quotation_for_update(quotation_id)
            if not quotation:
                raise QuotationNotFound()

            if quotation.user_id != user_id:
                raise Forbidden("convert this quotation")

            if quotation.status != QuotationStatus.APPROVED:
                raise QuotationNotApproved()

            if as_utc(quotation.valid_until) <= self.clock():
                raise QuotationExpired()

            # od wystawienia oferty minelo troche czasu - stan i aktywnosc sprawdzamy od nowa
            order_lines = []
            for item, product in self.repo.get_lines_with_products(quotation.id):
                if not product.is_active:
                    raise ProductUnavailable(product.name)

                if product.stock < item.quantity:
                    raise InsufficientStock(product.name, product.stock)

                order_lines.append(
                    OrderLine(
                        product_id=product.id,
                        quantity=item.quantity,
                        price=item.price,
                        product=product,
                    )
                )

            # zajmujemy oferte zanim powstanie zamowienie; drugi rownolegly convert dostanie 0 wierszy
            if self.repo.mark_converted(quotation.id) == 0:
                raise QuotationNotApproved()

            order = self.orders.place_order(
                user_id=user_id,
                lines=order_lines,
                shipping_address=shipping_address,
                billing_address=billing_address,
                notes=f"Converted from quotation {quotation.quotation_number}",
                total=quotation.total,
            )
            quotation.order_id = order.id

        logger.info(f"Quotation {quotation.quotation_number} converted to order {order.order_number}")
        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "order": OrderService.serialize(order),
        }

    def delete(self, quotation_id: str, user_id: str, is_admin: bool = False) -> None:
        with transaction(self.db):
            quotation = self.repo.get_quotation_for_update(quotation_id)
            if not quotation:
                raise QuotationNotFound()

            if not is_admin and quotation.user_id != user_id:
                raise Forbidden("delete this quotation")

            if quotation.status != QuotationStatus.PENDING:
                raise QuotationNotPending()

            self.repo.delete_quotation(quotation)

        logger.info(f"Quotation {quotation_id} deleted")

    def expire_overdue(self, now: datetime | None = None) -> int:
        """Oferty PENDING/APPROVED po terminie waznosci -> EXPIRED. Zwraca liczbe zmienionych."""
        with transaction(self.db):
            expired = self.repo.expire_overdue(as_utc(now) if now else self.clock())

        if expired:
            logger.info(f"Expired {expired} overdue quotations")
        return expired

    #query
    def find_all(
        self,
        user_id: str | None = None,
        status: QuotationStatus | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        page = max(page, 1)
        limit = max(limit, 1)

        rows, total = self.repo.list_quotations(
            user_id=user_id,
            status=QuotationStatus(status) if status else None,
            offset=(page - 1) * limit,
            limit=limit,
        )

        quotations = []
        for quotation, item_count in rows:
            data = self.serialize(quotation, with_items=False)
            data["item_count"] = int(item_count)
            quotations.append(data)

        return {
            "quotations": quotations,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        }

    def find_by_id(self, quotation_id: str) -> Dict[str, Any]:
        quotation = self.repo.get_quotation(quotation_id)
        if not quotation:
            raise QuotationNotFound()
        return self.serialize(quotation)

    def find_by_quotation_number(self, quotation_number: str) -> Dict[str, Any]:
        quotation = self.repo.get_by_number(quotation_number)
        if not quotation:
            raise QuotationNotFound()
        return self.serialize(quotation)

    @staticmethod
    def serialize(quotation: QuotationModel, with_items: bool = True) -> Dict[str, Any]:
        data = {
            "id": quotation.id,
            "quotation_number": quotation.quotation_number,
            "user_id": quotation.user_id,
            "status": quotation.status,
            "total": quotation.total,
            "valid_until": as_utc(quotation.valid_until),
            "notes": quotation.notes,
            "customer_notes": quotation.customer_notes,
            "order_id": quotation.order_id,
            "created_at": quotation.created_at,
            "updated_at": quotation.updated_at,
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
                for item in quotation.items
            ]
            data["items"] = items
            data["item_count"] = len(items)

        return data
