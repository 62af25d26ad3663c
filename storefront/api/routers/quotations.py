# storefront/api/routers/quotations.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, ensure_owner_or_admin, get_principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import (
    ConversionOut,
    ConvertToOrderIn,
    Envelope,
    MessageOut,
    QuotationCreate,
    QuotationList,
    QuotationOut,
    QuotationStatusUpdate,
)
from storefront.domain.status import QuotationStatus
from storefront.services.quotation_service import QuotationService
from storefront.utils.settings import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/quotations", tags=["quotations"])


def get_service(db: Session):
    return QuotationService(db)


@router.post("", response_model=Envelope[QuotationOut], status_code=201)
def create_quotation(
    payload: QuotationCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    quotation = svc.create(
        user_id=principal.user_id,
        items=[
            {"product_id": str(item.product_id), "quantity": item.quantity}
            for item in payload.items
        ],
        valid_until=payload.valid_until,
        notes=payload.notes,
        customer_notes=payload.customer_notes,
    )
    return {"message": "Quotation created successfully", "data": quotation}


@router.get("", response_model=Envelope[QuotationList])
def list_quotations(
    status: QuotationStatus | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return {
        "data": svc.find_all(
            user_id=principal.scope_user_id,
            status=status,
            page=page,
            limit=limit,
        )
    }


@router.get("/number/{quotation_number}", response_model=Envelope[QuotationOut])
def get_quotation_by_number(
    quotation_number: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    quotation = svc.find_by_quotation_number(quotation_number)
    ensure_owner_or_admin(principal, quotation["user_id"], "view this quotation")
    return {"data": quotation}


@router.get("/{quotation_id}", response_model=Envelope[QuotationOut])
def get_quotation(
    quotation_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    quotation = svc.find_by_id(str(quotation_id))
    ensure_owner_or_admin(principal, quotation["user_id"], "view this quotation")
    return {"data": quotation}


@router.patch("/{quotation_id}/status", response_model=Envelope[QuotationOut])
def update_quotation_status(
    quotation_id: UUID,
    payload: QuotationStatusUpdate,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    quotation = svc.update_status(str(quotation_id), payload.status, payload.notes)
    return {"message": "Quotation status updated", "data": quotation}


@router.post("/{quotation_id}/convert-to-order", response_model=Envelope[ConversionOut], status_code=201)
def convert_to_order(
    quotation_id: UUID,
    payload: ConvertToOrderIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    result = svc.convert_to_order(
        str(quotation_id),
        principal.user_id,
        shipping_address=payload.shipping_address.model_dump(by_alias=True),
        billing_address=payload.billing_address.model_dump(by_alias=True),
    )
    return {"message": "Quotation converted to order successfully", "data": result}


@router.delete("/{quotation_id}", response_model=MessageOut)
def delete_quotation(
    quotation_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    svc.delete(str(quotation_id), principal.user_id, is_admin=principal.is_admin)
    return {"message": "Quotation deleted successfully"}
