# storefront/api/routers/orders.py
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, ensure_owner_or_admin, get_principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import Envelope, OrderCreate, OrderList, OrderOut, OrderStatusUpdate
from storefront.domain.status import OrderStatus
from storefront.services.order_service import OrderService
from storefront.utils.settings import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("", response_model=Envelope[OrderOut], status_code=201)
def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """
    Checkout: zamowienie z aktualnego koszyka.
    Waliduje stan, zdejmuje towar i czysci koszyk w jednej transakcji.
    """
    svc = get_service(db)
    order = svc.create_from_cart(
        user_id=principal.user_id,
        shipping_address=payload.shipping_address.model_dump(by_alias=True),
        billing_address=payload.billing_address.model_dump(by_alias=True),
        payment_method=payload.payment_method,
        notes=payload.notes,
    )
    return {"message": "Order created successfully", "data": order}


@router.get("", response_model=Envelope[OrderList])
def list_orders(
    status: OrderStatus | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    # nie-admin widzi tylko swoje zamowienia
    svc = get_service(db)
    return {
        "data": svc.find_all(
            user_id=principal.scope_user_id,
            status=status,
            page=page,
            limit=limit,
        )
    }


@router.get("/number/{order_number}", response_model=Envelope[OrderOut])
def get_order_by_number(
    order_number: str = Path(..., pattern=r"^ORD-\d+-\d+$"),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    order = svc.find_by_order_number(order_number)
    ensure_owner_or_admin(principal, order["user_id"], "view this order")
    return {"data": order}


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    order = svc.find_by_id(str(order_id))
    ensure_owner_or_admin(principal, order["user_id"], "view this order")
    return {"data": order}


@router.patch("/{order_id}/status", response_model=Envelope[OrderOut])
def update_order_status(
    order_id: UUID,
    payload: OrderStatusUpdate,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    order = svc.update_status(str(order_id), payload.status, payload.payment_status)
    return {"message": "Order status updated", "data": order}


@router.patch("/{order_id}/cancel", response_model=Envelope[OrderOut])
def cancel_order(
    order_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    order = svc.cancel(str(order_id), principal.user_id, is_admin=principal.is_admin)
    return {"message": "Order cancelled successfully", "data": order}
