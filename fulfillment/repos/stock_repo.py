# fulfillment/repos/stock_repo.py
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from fulfillment.data.models.stock_record import StockRecordModel


class StockRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, stock_record_id: int) -> Optional[StockRecordModel]:
        return self.db.get(StockRecordModel, stock_record_id)

    def get_available(self, stock_record_id: int) -> Optional[int]:
        return self.db.execute(
            select(StockRecordModel.available).where(StockRecordModel.id == stock_record_id)
        ).scalar_one_or_none()

    def conditional_decrement(self, stock_record_id: int, quantity: int) -> int:
        # update set available = available - q where id = :id and available >= q
        result = self.db.execute(
            update(StockRecordModel)
            .where(
                StockRecordModel.id == stock_record_id,
                StockRecordModel.available >= quantity,
            )
            .values(available=StockRecordModel.available - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def increment(self, stock_record_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(StockRecordModel)
            .where(StockRecordModel.id == stock_record_id)
            .values(available=StockRecordModel.available + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
