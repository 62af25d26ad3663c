# storefront/repos/quotation_repo.py
from datetime import datetime

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.quotation import QuotationModel
from storefront.data.models.quotation_item import QuotationItemModel
from storefront.data.models.product import ProductModel
from storefront.data.models._columns import utcnow
from storefront.domain.status import QuotationStatus


class QuotationRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_quotation(self, quotation: QuotationModel) -> QuotationModel:
        self.db.add(quotation)
        self.db.flush()
        return quotation

    def get_quotation(self, quotation_id: str) -> QuotationModel | None:
        return self.db.execute(
            select(QuotationModel)
            .options(selectinload(QuotationModel.items).selectinload(QuotationItemModel.product))
            .where(QuotationModel.id == quotation_id)
        ).scalar_one_or_none()

    def get_quotation_for_update(self, quotation_id: str) -> QuotationModel | None:
        # blokada wiersza + swiezy stan z bazy - zmiana statusu nie nadpisze rownoleglej konwersji
        return self.db.execute(
            select(QuotationModel)
            .options(selectinload(QuotationModel.items).selectinload(QuotationItemModel.product))
            .where(QuotationModel.id == quotation_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_by_number(self, quotation_number: str) -> QuotationModel | None:
        return self.db.execute(
            select(QuotationModel)
            .options(selectinload(QuotationModel.items).selectinload(QuotationItemModel.product))
            .where(QuotationModel.quotation_number == quotation_number)
        ).scalar_one_or_none()

    def get_lines_with_products(
        self, quotation_id: str
    ) -> list[tuple[QuotationItemModel, ProductModel]]:
        rows = self.db.execute(
            select(QuotationItemModel, ProductModel)
            .join(ProductModel, QuotationItemModel.product_id == ProductModel.id)
            .where(QuotationItemModel.quotation_id == quotation_id)
            .order_by(QuotationItemModel.id)
        ).all()
        return [(item, product) for item, product in rows]

    def mark_converted(self, quotation_id: str) -> int:
        # APPROVED -> CONVERTED tylko raz; rowcount 0 = ktos juz skonwertowal (albo status sie zmienil)
        result = self.db.execute(
            update(QuotationModel)
            .where(
                QuotationModel.id == quotation_id,
                QuotationModel.status == QuotationStatus.APPROVED,
            )
            .values(status=QuotationStatus.CONVERTED, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        cached = self.db.identity_map.get(self.db.identity_key(QuotationModel, quotation_id))
        if cached is not None:
            self.db.expire(cached, ["status", "updated_at"])
        return result.rowcount

    def expire_overdue(self, now: datetime) -> int:
        result = self.db.execute(
            update(QuotationModel)
            .where(
                QuotationModel.status.in_([QuotationStatus.PENDING, QuotationStatus.APPROVED]),
                QuotationModel.valid_until < now,
            )
            .values(status=QuotationStatus.EXPIRED, updated_at=now)
            # oferty juz wczytane do sesji tez dostaja EXPIRED
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def delete_quotation(self, quotation: QuotationModel) -> None:
        self.db.delete(quotation)
        self.db.flush()

    def list_quotations(
        self,
        user_id: str | None,
        status: QuotationStatus | None,
        offset: int,
        limit: int,
    ) -> tuple[list[tuple[QuotationModel, int]], int]:
        conditions = []
        if user_id:
            conditions.append(QuotationModel.user_id == user_id)
        if status:
            conditions.append(QuotationModel.status == status)

        total = self.db.execute(
            select(func.count()).select_from(QuotationModel).where(*conditions)
        ).scalar_one()

        item_count = (
            select(func.count(QuotationItemModel.id))
            .where(QuotationItemModel.quotation_id == QuotationModel.id)
            .correlate(QuotationModel)
            .scalar_subquery()
        )
        rows = self.db.execute(
            select(QuotationModel, item_count)
            .where(*conditions)
            .order_by(QuotationModel.created_at.desc(), QuotationModel.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [(quotation, count) for quotation, count in rows], total
