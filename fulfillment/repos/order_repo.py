# fulfillment/repos/order_repo.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from fulfillment.data.models.order import OrderModel
from fulfillment.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_items(self, items: List[OrderItemModel]) -> List[OrderItemModel]:
        self.db.add_all(items)
        self.db.flush()
        return items

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_user_order(self, order_id: int, user_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(
                OrderModel.id == order_id,
                OrderModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def list_user_orders(self, user_id: int) -> List[OrderModel]:
        return self.db.execute(
            select(OrderModel)
            .options(
                selectinload(OrderModel.items).selectinload(OrderItemModel.stock_record),
                selectinload(OrderModel.address),
            )
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        ).scalars().all()

    def get_items(self, order_id: int) -> List[OrderItemModel]:
        return self.db.execute(
            select(OrderItemModel)
            .options(selectinload(OrderItemModel.stock_record))
            .where(OrderItemModel.order_id == order_id)
            .order_by(OrderItemModel.id)
        ).scalars().all()

    def stale_pending_invoices(self, created_before: datetime) -> List[OrderModel]:
        return self.db.execute(
            select(OrderModel).where(
                OrderModel.invoice_status == "PENDING",
                OrderModel.created_at < created_before,
            )
        ).scalars().all()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
