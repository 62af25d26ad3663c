# storefront/domain/errors.py
"""
Bledy domenowe. Serwisy je rzucaja, api zamienia na odpowiedz http
(status_code siedzi na klasie bledu).
"""


class CommerceError(Exception):
    status_code = 500
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CommerceError):
    status_code = 404
    kind = "not_found"


class BusinessRuleError(CommerceError):
    status_code = 400
    kind = "validation"


class ConflictError(CommerceError):
    status_code = 409
    kind = "conflict"


class ForbiddenError(CommerceError):
    status_code = 403
    kind = "forbidden"


# --- 404 ---
class ProductNotFound(NotFoundError):
    def __init__(self, product_id: str):
        super().__init__(f"Product with ID {product_id} not found")
        self.product_id = product_id


class CartNotFound(NotFoundError):
    def __init__(self):
        super().__init__("Cart not found")


class CartItemNotFound(NotFoundError):
    def __init__(self):
        super().__init__("Cart item not found")


class OrderNotFound(NotFoundError):
    def __init__(self):
        super().__init__("Order not found")


class QuotationNotFound(NotFoundError):
    def __init__(self):
        super().__init__("Quotation not found")


# --- 400 ---
class InsufficientStock(BusinessRuleError):
    def __init__(self, product_name: str, available: int | None = None):
        message = f'Insufficient stock for product "{product_name}"'
        if available is not None:
            message += f". Available: {available}"
        super().__init__(message)
        self.available = available


class ProductUnavailable(BusinessRuleError):
    def __init__(self, product_name: str):
        super().__init__(f'Product "{product_name}" is not available')


class ProductInactive(ProductUnavailable):
    pass


class StockLimitExceeded(BusinessRuleError):
    def __init__(self, product_id: str):
        super().__init__(f"Stock limit exceeded for product {product_id}")


class InvalidQuantity(BusinessRuleError):
    def __init__(self):
        super().__init__("Quantity must be at least 1")


class CartEmpty(BusinessRuleError):
    def __init__(self):
        super().__init__("Cart is empty")


class ItemsRequired(BusinessRuleError):
    def __init__(self):
        super().__init__("At least one item is required")


class InvalidStatusTransition(BusinessRuleError):
    def __init__(self, entity: str, current: str, new: str):
        super().__init__(f"Cannot change {entity} status from {current} to {new}")
        self.current = current
        self.new = new


class QuotationNotApproved(BusinessRuleError):
    def __init__(self):
        super().__init__("Only approved quotations can be converted to orders")


class QuotationExpired(BusinessRuleError):
    def __init__(self):
        super().__init__("Quotation has expired")


class QuotationNotPending(BusinessRuleError):
    def __init__(self):
        super().__init__("Only pending quotations can be deleted")


# --- 409 ---
class OrderNumberConflict(ConflictError):
    def __init__(self, entity: str = "order"):
        super().__init__(f"Could not allocate a unique {entity} number")


# --- 403 ---
class Forbidden(ForbiddenError):
    def __init__(self, action: str):
        super().__init__(f"You do not have permission to {action}")
