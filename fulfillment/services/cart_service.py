from typing import Dict, Any
from sqlalchemy.orm import Session
from fulfillment.data.models.cart_item import CartItemModel
from fulfillment.domain.errors import InsufficientStock, NotFound, ValidationError
from fulfillment.domain.projections import project_cart_item, project_charges
from fulfillment.repos.cart_repo import CartRepo
from fulfillment.repos.charges_repo import ChargesRepo
from fulfillment.repos.stock_repo import StockRepo
from fulfillment.services.charges_service import ChargesCalculator
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)

class CartService:
    """
    Prosta implementacja cqrs dla koszyka
    commands (add, update, remove) modyfikuja stan i w tej samej transakcji przeliczaja oplaty
    query (get_cart, get_charges) tylko odczyt
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.stock_repo = StockRepo(db)
        self.charges_repo = ChargesRepo(db)
        self.calculator = ChargesCalculator(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        items = self.repo.get_user_items(user_id)
        charges = self.charges_repo.get_for_user(user_id)

        return {
            "user_id": user_id,
            "items": [project_cart_item(i) for i in items],
            "charges": project_charges(charges),
        }

    def get_charges(self, user_id: int) -> Dict[str, Any]:
        charges = self.charges_repo.get_for_user(user_id)
        if not charges:
            raise NotFound("Charges data not found for the user")
        return project_charges(charges)

    #commands
    def add_item(
        self,
        user_id: int,
        variant_id: int,
        stock_record_id: int,
        quantity: int,
    ) -> Dict[str, Any]:

        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")

        try:
            stock = self.stock_repo.get(stock_record_id)
            if not stock or stock.variant_id != variant_id:
                raise NotFound("Product size and stock not found")

            existing_item = self.repo.find_item(user_id, variant_id, stock_record_id)
            total_requested = quantity + (existing_item.quantity if existing_item else 0)

            if total_requested > stock.available:
                raise InsufficientStock(stock.available)

            if existing_item:
                logger.info(
                    f"Stock {stock_record_id} already in cart of user {user_id}, "
                    f"quantity {existing_item.quantity} -> {total_requested}"
                )
                existing_item.quantity = total_requested
                existing_item.total_price = stock.offer_price * total_requested
                item = self.repo.add_item(existing_item)
            else:
                logger.info(f"Adding stock {stock_record_id} to cart of user {user_id}")
                item = self.repo.add_item(
                    CartItemModel(
                        user_id=user_id,
                        variant_id=variant_id,
                        stock_record=stock,
                        quantity=total_requested,
                        total_price=stock.offer_price * total_requested,
                    )
                )

            self.calculator.recalculate(user_id)
            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        return project_cart_item(item)

    def update_item(
        self,
        user_id: int,
        cart_item_id: int,
        quantity: int | None = None,
        stock_record_id: int | None = None,
    ) -> Dict[str, Any]:

        try:
            item = self.repo.get_item(cart_item_id, user_id)
            if not item:
                raise NotFound("Cart item not found")

            final_stock_id = stock_record_id or item.stock_record_id
            final_quantity = quantity if quantity is not None else item.quantity

            if final_quantity <= 0:
                raise ValidationError("Invalid quantity value")

            stock = self.stock_repo.get(final_stock_id)
            if not stock or stock.variant_id != item.variant_id:
                raise NotFound("Product stock not found")

            if final_quantity > stock.available:
                raise InsufficientStock(stock.available)

            #ten sam wariant i rozmiar juz jest w koszyku - scalamy do tamtego wiersza
            duplicate = self.repo.find_item(
                user_id, item.variant_id, final_stock_id, exclude_id=item.id
            )

            if duplicate:
                logger.info(f"Merging cart item {item.id} into {duplicate.id}")
                duplicate.quantity = final_quantity
                duplicate.total_price = stock.offer_price * final_quantity
                self.repo.delete_item(item)
                item = self.repo.add_item(duplicate)
            else:
                item.quantity = final_quantity
                item.stock_record = stock
                item.total_price = stock.offer_price * final_quantity
                item = self.repo.add_item(item)

            self.calculator.recalculate(user_id)
            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cart item {item.id} of user {user_id} updated, quantity {final_quantity}")
        return project_cart_item(item)

    def remove_item(self, user_id: int, cart_item_id: int) -> Dict[str, Any]:
        try:
            item = self.repo.get_item(cart_item_id, user_id)
            if not item:
                raise NotFound("Cart item not found")

            self.repo.delete_item(item)
            charges = self.calculator.recalculate(user_id)
            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cart item {cart_item_id} removed from cart of user {user_id}")
        return {"deleted_id": cart_item_id, "charges": project_charges(charges)}
