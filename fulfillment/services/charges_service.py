# fulfillment/services/charges_service.py
from decimal import Decimal

from sqlalchemy.orm import Session

from fulfillment.data.models.charges import ChargesModel
from fulfillment.repos.cart_repo import CartRepo
from fulfillment.repos.charges_repo import ChargesRepo
from fulfillment.utils.settings import (
    DELIVERY_CHARGE,
    FREE_DELIVERY_THRESHOLD,
    HANDLING_CHARGE,
    TAX_AMOUNT,
)
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


def delivery_charge_for(total_price: Decimal) -> Decimal:
    #darmowa dostawa powyzej progu
    return Decimal("0") if total_price > FREE_DELIVERY_THRESHOLD else DELIVERY_CHARGE


class ChargesCalculator:
    """
    Przelicza snapshot oplat od zera na podstawie aktualnego koszyka.
    Musi byc wolany w tej samej transakcji co zmiana koszyka (tylko flush).
    """

    def __init__(self, db: Session):
        self.cart_repo = CartRepo(db)
        self.repo = ChargesRepo(db)

    def recalculate(self, user_id: int) -> ChargesModel | None:
        items = self.cart_repo.get_user_items(user_id)

        if not items:
            deleted = self.repo.delete_for_user(user_id)
            if deleted:
                logger.info(f"Cart of user {user_id} is empty, charges removed")
            return None

        total_quantity = 0
        total_price = Decimal("0.00")
        discount_price = Decimal("0.00")

        for item in items:
            stock = item.stock_record
            total_quantity += item.quantity
            total_price += stock.offer_price * item.quantity
            discount_price += (stock.actual_price - stock.offer_price) * item.quantity

        tax = TAX_AMOUNT
        handling_charge = HANDLING_CHARGE
        delivery_charge = delivery_charge_for(total_price)
        total_payable = total_price + tax + handling_charge + delivery_charge

        charges = self.repo.get_for_user(user_id) or ChargesModel(user_id=user_id)
        charges.total_quantity = total_quantity
        charges.total_price = total_price
        charges.discount_price = discount_price
        charges.tax = tax
        charges.handling_charge = handling_charge
        charges.delivery_charge = delivery_charge
        charges.total_payable_amount = total_payable

        self.repo.save(charges)

        logger.info(
            f"Charges for user {user_id} recalculated: qty={total_quantity} "
            f"payable={total_payable}"
        )
        return charges
