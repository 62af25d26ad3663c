# storefront/repos/order_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.status import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items).selectinload(OrderItemModel.product))
            .where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def get_order_for_update(self, order_id: str) -> OrderModel | None:
        # blokada wiersza do konca transakcji - dwa rownolegle cancel nie oddadza towaru dwa razy
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_by_number(self, order_number: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items).selectinload(OrderItemModel.product))
            .where(OrderModel.order_number == order_number)
        ).scalar_one_or_none()

    def get_items(self, order_id: str) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel).where(OrderItemModel.order_id == order_id)
            ).scalars().all()
        )

    def list_orders(
        self,
        user_id: str | None,
        status: OrderStatus | None,
        offset: int,
        limit: int,
    ) -> tuple[list[tuple[OrderModel, int]], int]:
        conditions = []
        if user_id:
            conditions.append(OrderModel.user_id == user_id)
        if status:
            conditions.append(OrderModel.status == status)

        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()

        item_count = (
            select(func.count(OrderItemModel.id))
            .where(OrderItemModel.order_id == OrderModel.id)
            .correlate(OrderModel)
            .scalar_subquery()
        )
        rows = self.db.execute(
            select(OrderModel, item_count)
            .where(*conditions)
            .order_by(OrderModel.created_at.desc(), OrderModel.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [(order, count) for order, count in rows], total
