# storefront/repos/order_repo.py
from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, order: OrderModel) -> OrderModel:
        # flush only, caller owns the transaction
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_user_order(self, order_id: int, user_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id, OrderModel.user_id == user_id)
        ).scalar_one_or_none()

    def list_user_orders(
        self,
        user_id: int,
        status: str | None,
        page: int,
        limit: int,
    ) -> tuple[list[OrderModel], int]:
        conditions = [OrderModel.user_id == user_id]
        if status:
            conditions.append(OrderModel.status == status)

        items = self.db.execute(
            select(OrderModel)
            .where(*conditions)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()
        total = self.db.execute(
            select(func.count(OrderModel.id)).where(*conditions)
        ).scalar_one()
        return list(items), total

    def recent(self, limit: int = 5) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel).order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(limit)
            ).scalars().all()
        )

    def paid_since(self, since: datetime) -> list[tuple[datetime, object]]:
        rows = self.db.execute(
            select(OrderModel.created_at, OrderModel.total).where(
                OrderModel.payment_status == "completed",
                OrderModel.created_at >= since,
            )
        ).all()
        return [(r[0], r[1]) for r in rows]

    def transaction_owner(self, transaction_id: str) -> int | None:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.payment_transaction_id == transaction_id).limit(1)
        ).scalar_one_or_none()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order
