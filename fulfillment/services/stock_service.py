# fulfillment/services/stock_service.py
from sqlalchemy.orm import Session

from fulfillment.domain.errors import ValidationError
from fulfillment.repos.stock_repo import StockRepo
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


class StockReservationEngine:
    """
    -rezerwacja stanu (warunkowy dekrement)
    -zwalnianie stanu przy anulowaniu
    Dziala w transakcji wywolujacego, commit/rollback robi serwis wyzej.
    """

    def __init__(self, db: Session):
        self.repo = StockRepo(db)

    def reserve(self, stock_record_id: int, quantity: int) -> bool:
        _check_quantity(quantity)
        #jeden UPDATE z warunkiem available >= quantity, baza serializuje rownolegle zapisy
        #jak nikt nie spelnia warunku to 0 rows i nic sie nie zmienia
        rowcount = self.repo.conditional_decrement(stock_record_id, quantity)
        if rowcount == 0:
            logger.warning(f"Reserve {quantity} of stock {stock_record_id} failed: insufficient")
            return False
        logger.info(f"Reserved {quantity} of stock {stock_record_id}")
        return True

    def release(self, stock_record_id: int, quantity: int) -> None:
        _check_quantity(quantity)
        rowcount = self.repo.increment(stock_record_id, quantity)
        if rowcount == 0:
            logger.warning(f"Release on missing stock record {stock_record_id}")
            return
        logger.info(f"Released {quantity} to stock {stock_record_id}")

    def available(self, stock_record_id: int) -> int | None:
        return self.repo.get_available(stock_record_id)


def _check_quantity(quantity: int) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")
