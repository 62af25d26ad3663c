# storefront/domain/status.py
import enum


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_cancellable(self) -> bool:
        return OrderStatus.CANCELLED in ORDER_TRANSITIONS[self]

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        return new_status in ORDER_TRANSITIONS[self]


#jedyne miejsce z regulami przejsc zamowienia
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class QuotationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    # oferta zamieniona na zamowienie, nie da sie jej uzyc drugi raz
    CONVERTED = "CONVERTED"

    def can_transition_to(self, new_status: "QuotationStatus") -> bool:
        return new_status in QUOTATION_TRANSITIONS[self]


QUOTATION_TRANSITIONS: dict[QuotationStatus, frozenset[QuotationStatus]] = {
    QuotationStatus.PENDING: frozenset(
        {QuotationStatus.APPROVED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED}
    ),
    QuotationStatus.APPROVED: frozenset(
        {QuotationStatus.REJECTED, QuotationStatus.EXPIRED, QuotationStatus.CONVERTED}
    ),
    QuotationStatus.REJECTED: frozenset(),
    QuotationStatus.EXPIRED: frozenset(),
    QuotationStatus.CONVERTED: frozenset(),
}

# statusy ktore admin moze ustawic recznie (CONVERTED tylko przez konwersje)
ADMIN_QUOTATION_STATUSES = frozenset(
    {
        QuotationStatus.PENDING,
        QuotationStatus.APPROVED,
        QuotationStatus.REJECTED,
        QuotationStatus.EXPIRED,
    }
)


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
