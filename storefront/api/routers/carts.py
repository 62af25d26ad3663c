#storefront/api/routers/carts.py
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, get_principal
from storefront.data.database import get_db
from storefront.domain.schemas import CartOut, Envelope, ItemIn, ItemQuantityIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=Envelope[CartOut])
def get_cart(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return {"data": svc.get_cart(principal.user_id)}


@router.post("/items", response_model=Envelope[CartOut])
def add_item(
    payload: ItemIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    cart = svc.add_item(
        user_id=principal.user_id,
        product_id=str(payload.product_id),
        quantity=payload.quantity,
    )
    return {"message": "Product added to cart", "data": cart}


@router.put("/items/{item_id}", response_model=Envelope[CartOut])
def update_item(
    item_id: UUID,
    payload: ItemQuantityIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    cart = svc.update_item(principal.user_id, str(item_id), payload.quantity)
    return {"message": "Cart item updated", "data": cart}


@router.delete("/items/{item_id}", response_model=Envelope[CartOut])
def remove_item(
    item_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    cart = svc.remove_item(principal.user_id, str(item_id))
    return {"message": "Product removed from cart", "data": cart}


@router.delete("", response_model=Envelope[CartOut])
def clear_cart(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    cart = svc.clear_cart(principal.user_id)
    return {"message": "Cart cleared successfully", "data": cart}
