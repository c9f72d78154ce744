# fulfillment/domain/order_state.py
from enum import Enum

from fulfillment.domain.errors import InvalidState, LockedState, PaymentLocked, ValidationError


class PaymentMode(str, Enum):
    COD = "COD"
    ONLINE = "ONLINE"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"
    CANCELLED = "Cancelled"


class OrderStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class DeliveryStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"


# kolejnosc dostawy, Cancelled poza sekwencja
DELIVERY_SEQUENCE = [
    DeliveryStatus.PENDING,
    DeliveryStatus.PROCESSING,
    DeliveryStatus.SHIPPED,
    DeliveryStatus.OUT_FOR_DELIVERY,
    DeliveryStatus.DELIVERED,
]

TERMINAL_DELIVERY = {DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED}
TERMINAL_ORDER = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
LOCKED_PAYMENT = {PaymentStatus.PAID, PaymentStatus.REFUNDED}
CANCELLABLE_DELIVERY = {DeliveryStatus.PENDING, DeliveryStatus.PROCESSING}


def parse_status(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {enum_cls.__name__} value: {value}")


def ensure_mutable(order_status: str, delivery_status: str) -> None:
    if DeliveryStatus(delivery_status) in TERMINAL_DELIVERY or OrderStatus(order_status) in TERMINAL_ORDER:
        raise LockedState()


def check_payment_transition(current: str, new: str) -> bool:
    """
    Zwraca True jesli status platnosci faktycznie sie zmienia.
    Paid i Refunded sa zablokowane.
    """
    if parse_status(PaymentStatus, new) == PaymentStatus(current):
        return False
    if PaymentStatus(current) in LOCKED_PAYMENT:
        raise PaymentLocked()
    return True


def check_delivery_transition(current: str, new: str) -> bool:
    """
    Zwraca True jesli status dostawy faktycznie sie zmienia.
    Tylko do przodu (mozna przeskoczyc krok) albo Cancelled przed Delivered.
    """
    current, new = DeliveryStatus(current), parse_status(DeliveryStatus, new)
    if new == current:
        return False
    if current in TERMINAL_DELIVERY:
        raise LockedState()
    if new == DeliveryStatus.CANCELLED:
        return True
    if DELIVERY_SEQUENCE.index(new) < DELIVERY_SEQUENCE.index(current):
        raise InvalidState(f"Delivery status cannot move back from {current.value} to {new.value}")
    return True


def can_cancel(order_status: str, delivery_status: str) -> bool:
    return (
        OrderStatus(order_status) == OrderStatus.ACTIVE
        and DeliveryStatus(delivery_status) in CANCELLABLE_DELIVERY
    )


def payment_status_after_cancel(payment_mode: str, payment_status: str) -> str:
    if PaymentMode(payment_mode) == PaymentMode.COD:
        return PaymentStatus.CANCELLED.value
    if PaymentStatus(payment_status) == PaymentStatus.PAID:
        return PaymentStatus.REFUNDED.value
    return payment_status
