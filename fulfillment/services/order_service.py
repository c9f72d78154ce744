# fulfillment/services/order_service.py
from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from fulfillment.data.models.order import OrderModel
from fulfillment.data.models.order_item import OrderItemModel
from fulfillment.domain.errors import (
    CancellationNotAllowed,
    InsufficientStock,
    InvalidState,
    NotFound,
    ValidationError,
)
from fulfillment.domain.order_state import (
    DeliveryStatus,
    InvoiceStatus,
    OrderStatus,
    PaymentMode,
    PaymentStatus,
    can_cancel,
    check_delivery_transition,
    check_payment_transition,
    ensure_mutable,
    payment_status_after_cancel,
)
from fulfillment.domain.projections import FINANCIAL_FIELDS, project_order
from fulfillment.repos.cart_repo import CartRepo
from fulfillment.repos.charges_repo import ChargesRepo
from fulfillment.repos.order_repo import OrderRepo
from fulfillment.repos.user_repo import UserRepo
from fulfillment.services.payment_service import PaymentGatewayClient, PaymentVerifier
from fulfillment.services.stock_service import StockReservationEngine
from fulfillment.utils.settings import PAYMENT_CURRENCY, PAYMENT_KEY_ID
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


def _utcnow():
    return datetime.now(timezone.utc)


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Kazda komenda to jedna transakcja: commit na koncu, rollback przy dowolnym bledzie.
    Skutki uboczne po commicie (socket, faktura, maile) robi OrderEvents poza tym serwisem.
    """

    def __init__(
        self,
        db: Session,
        verifier: PaymentVerifier | None = None,
        gateway: PaymentGatewayClient | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.charges_repo = ChargesRepo(db)
        self.user_repo = UserRepo(db)
        self.stock = StockReservationEngine(db)
        self.verifier = verifier or PaymentVerifier()
        self.gateway = gateway

    # =====================================================
    # ORDER ASSEMBLY
    # =====================================================
    def assemble(
        self,
        user_id: int,
        address_id: int,
        cart_item_ids: Sequence[int],
        charges_id: int,
        payment_mode: PaymentMode,
        payment_refs: Optional[Tuple[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Use Case: zamiana koszyka w zamowienie.

        1. adres nalezy do uzytkownika
        2. pozycje koszyka (liczba musi sie zgadzac)
        3. sprawdzenie stanu
        4. warunkowy dekrement stanu (przegrany wyscig = rollback calosci)
        5. snapshot oplat
        6. zamowienie z zamrozona kopia oplat
        7. pozycje zamowienia
        8. czyszczenie koszyka i snapshotu
        """
        payment_mode = PaymentMode(payment_mode)
        requested_ids = list(dict.fromkeys(cart_item_ids or []))
        if not requested_ids:
            raise ValidationError("Cart items are required")

        try:
            address = self.user_repo.get_user_address(address_id, user_id)
            if not address:
                raise NotFound("Address not found")

            cart_items = self.cart_repo.get_items_by_ids(requested_ids, user_id)
            if len(cart_items) != len(requested_ids):
                raise InvalidState("Some cart items not found")

            for item in cart_items:
                available = self.stock.available(item.stock_record_id)
                if available is None or available < item.quantity:
                    raise InsufficientStock(available or 0)

            for item in cart_items:
                if not self.stock.reserve(item.stock_record_id, item.quantity):
                    #ktos inny kupil w miedzyczasie
                    raise InsufficientStock(self.stock.available(item.stock_record_id) or 0)

            charges = self.charges_repo.get(charges_id, user_id)
            if not charges:
                raise InvalidState("Invalid charges data")

            order = OrderModel(
                user_id=user_id,
                address_id=address.id,
                payment_mode=payment_mode.value,
                payment_status=(
                    PaymentStatus.PAID.value
                    if payment_mode == PaymentMode.ONLINE
                    else PaymentStatus.PENDING.value
                ),
                order_status=OrderStatus.ACTIVE.value,
                delivery_status=DeliveryStatus.PENDING.value,
                invoice_status=InvoiceStatus.PENDING.value,
            )
            for field in FINANCIAL_FIELDS:
                setattr(order, field, getattr(charges, field))
            if payment_refs:
                order.remote_order_ref, order.remote_payment_ref = payment_refs

            created = self.repo.create_order(order)

            items = self.repo.add_items([
                OrderItemModel(
                    order_id=created.id,
                    variant_id=item.variant_id,
                    stock_record_id=item.stock_record_id,
                    quantity=item.quantity,
                    price=item.total_price,
                )
                for item in cart_items
            ])

            self.cart_repo.delete_items(requested_ids, user_id)
            self.charges_repo.delete(charges.id, user_id)

            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {created.id} placed by user {user_id} ({payment_mode.value}), "
            f"{len(items)} items, payable {created.total_payable_amount}"
        )

        return project_order(created, items=self.repo.get_items(created.id), address=address)

    def place_cod_order(self, user_id: int, address_id: int, cart_item_ids: Sequence[int], charges_id: int):
        return self.assemble(user_id, address_id, cart_item_ids, charges_id, PaymentMode.COD)

    def place_online_order(
        self,
        user_id: int,
        address_id: int,
        cart_item_ids: Sequence[int],
        charges_id: int,
        remote_order_ref: str,
        remote_payment_ref: str,
        signature: str,
    ):
        # podpis sprawdzony zanim dotkniemy bazy
        self.verifier.verify(remote_order_ref, remote_payment_ref, signature)

        return self.assemble(
            user_id,
            address_id,
            cart_item_ids,
            charges_id,
            PaymentMode.ONLINE,
            payment_refs=(remote_order_ref, remote_payment_ref),
        )

    def create_payment(self, user_id: int, charges_id: int) -> Dict[str, Any]:
        """
        Use Case: zamowienie w bramce platnosci na kwote ze snapshotu oplat.
        Kwota liczona po stronie serwera, nie od klienta.
        """
        if self.gateway is None:
            raise RuntimeError("Payment gateway not configured")

        charges = self.charges_repo.get(charges_id, user_id)
        if not charges:
            raise InvalidState("Invalid charges data")

        amount = int(
            (Decimal(charges.total_payable_amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        )
        if amount <= 0:
            raise ValidationError("Invalid amount")

        remote = self.gateway.create_remote_order(
            amount,
            PAYMENT_CURRENCY,
            receipt=f"charges_{charges.id}_{int(_utcnow().timestamp())}",
        )

        logger.info(f"Remote payment order {remote.get('id')} created for user {user_id}, amount {amount}")

        return {
            "remote_order_ref": remote["id"],
            "amount": remote.get("amount", amount),
            "currency": remote.get("currency", PAYMENT_CURRENCY),
            "receipt": remote.get("receipt"),
            "key_id": self.gateway.key_id or PAYMENT_KEY_ID,
        }

    # =====================================================
    # STATUS MACHINE
    # =====================================================
    def update_status(
        self,
        order_id: int,
        delivery_status: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> Tuple[Dict[str, Any], List[str], Optional[str]]:
        """
        Use Case: zmiana statusu platnosci i/lub dostawy (admin).
        Zwraca (zamowienie, lista zmian ["payment", "delivery"], email uzytkownika).
        """
        changes: List[str] = []

        try:
            order = self.repo.get_order(order_id)
            if not order:
                raise NotFound("Order not found")

            ensure_mutable(order.order_status, order.delivery_status)

            if payment_status and check_payment_transition(order.payment_status, payment_status):
                order.payment_status = PaymentStatus(payment_status).value
                changes.append("payment")

            if delivery_status and check_delivery_transition(order.delivery_status, delivery_status):
                new_status = DeliveryStatus(delivery_status)
                order.delivery_status = new_status.value

                if new_status == DeliveryStatus.DELIVERED:
                    order.delivered_at = _utcnow()
                    order.order_status = OrderStatus.COMPLETED.value

                if new_status == DeliveryStatus.CANCELLED:
                    order.cancelled_at = _utcnow()
                    order.order_status = OrderStatus.CANCELLED.value

                changes.append("delivery")

            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        if changes:
            logger.info(
                f"Order {order.id} updated ({', '.join(changes)}): payment={order.payment_status} "
                f"delivery={order.delivery_status} order={order.order_status}"
            )

        user = self.user_repo.get_user(order.user_id)
        return self._project(order), changes, user.email if user else None

    # =====================================================
    # CANCELLATION
    # =====================================================
    def cancel(self, order_id: int, user_id: int) -> Tuple[Dict[str, Any], Optional[str]]:
        """
        Use Case: anulowanie przez uzytkownika.
        Tylko Active i przed wysylka (Pending/Processing). Stan wraca do magazynu w tej samej transakcji.
        """
        try:
            order = self.repo.get_user_order(order_id, user_id)
            if not order:
                raise NotFound("Order not found")

            if not can_cancel(order.order_status, order.delivery_status):
                raise CancellationNotAllowed("Order cannot be cancelled now")

            for item in self.repo.get_items(order.id):
                self.stock.release(item.stock_record_id, item.quantity)

            order.order_status = OrderStatus.CANCELLED.value
            order.delivery_status = DeliveryStatus.CANCELLED.value
            order.cancelled_at = _utcnow()
            order.payment_status = payment_status_after_cancel(order.payment_mode, order.payment_status)

            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order.id} cancelled by user {user_id}, payment={order.payment_status}")

        user = self.user_repo.get_user(user_id)
        return self._project(order), user.email if user else None

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self.repo.get_user_order(order_id, user_id)
        if not order:
            raise NotFound("Order not found")
        return self._project(order)

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [project_order(o) for o in self.repo.list_user_orders(user_id)]

    def _project(self, order: OrderModel) -> Dict[str, Any]:
        return project_order(order, items=self.repo.get_items(order.id))
