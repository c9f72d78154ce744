# fulfillment/repos/cart_repo.py
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, joinedload

from fulfillment.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user_items(self, user_id: int) -> List[CartItemModel]:
        return self.db.execute(
            select(CartItemModel)
            .options(joinedload(CartItemModel.stock_record))
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.id)
        ).scalars().all()

    def get_item(self, item_id: int, user_id: int) -> Optional[CartItemModel]:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def find_item(
        self,
        user_id: int,
        variant_id: int,
        stock_record_id: int,
        exclude_id: Optional[int] = None,
    ) -> Optional[CartItemModel]:
        stmt = select(CartItemModel).where(
            CartItemModel.user_id == user_id,
            CartItemModel.variant_id == variant_id,
            CartItemModel.stock_record_id == stock_record_id,
        )
        if exclude_id is not None:
            stmt = stmt.where(CartItemModel.id != exclude_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_items_by_ids(self, item_ids: Sequence[int], user_id: int) -> List[CartItemModel]:
        return self.db.execute(
            select(CartItemModel)
            .where(
                CartItemModel.id.in_(item_ids),
                CartItemModel.user_id == user_id,
            )
            .order_by(CartItemModel.id)
        ).scalars().all()

    def add_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def delete_items(self, item_ids: Sequence[int], user_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.id.in_(item_ids),
                CartItemModel.user_id == user_id,
            )
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
