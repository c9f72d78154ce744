import pytest

from fulfillment.domain.errors import (
    CancellationNotAllowed,
    InvalidState,
    LockedState,
    NotFound,
    PaymentLocked,
    ValidationError,
)
from fulfillment.domain.order_state import (
    can_cancel,
    check_delivery_transition,
    payment_status_after_cancel,
)
from fulfillment.repos.stock_repo import StockRepo
from fulfillment.services.order_service import OrderService
from fulfillment.services.payment_service import PaymentVerifier


@pytest.fixture
def cod_order(db, checkout):
    return OrderService(db).place_cod_order(
        checkout["user"].id, checkout["address"].id, checkout["cart_item_ids"], checkout["charges_id"]
    )


@pytest.fixture
def online_order(db, checkout):
    signature = PaymentVerifier().signature_for("order_r", "pay_r")
    return OrderService(db).place_online_order(
        checkout["user"].id,
        checkout["address"].id,
        checkout["cart_item_ids"],
        checkout["charges_id"],
        "order_r",
        "pay_r",
        signature,
    )


@pytest.mark.parametrize(
    "current,new,changed",
    [
        ("Pending", "Processing", True),
        ("Pending", "Shipped", True),
        ("Shipped", "Out for Delivery", True),
        ("Processing", "Cancelled", True),
        ("Shipped", "Shipped", False),
    ],
)
def test_delivery_transitions(current, new, changed):
    assert check_delivery_transition(current, new) is changed


def test_delivery_cannot_go_back():
    with pytest.raises(InvalidState):
        check_delivery_transition("Shipped", "Processing")


def test_cancel_rules():
    assert can_cancel("Active", "Pending")
    assert can_cancel("Active", "Processing")
    assert not can_cancel("Active", "Shipped")
    assert not can_cancel("Completed", "Delivered")
    assert payment_status_after_cancel("COD", "Pending") == "Cancelled"
    assert payment_status_after_cancel("ONLINE", "Paid") == "Refunded"
    assert payment_status_after_cancel("ONLINE", "Failed") == "Failed"


def test_update_reports_changes_and_email(db, cod_order):
    order, changes, email = OrderService(db).update_status(
        cod_order["id"], delivery_status="Shipped", payment_status="Paid"
    )

    assert changes == ["payment", "delivery"]
    assert order["delivery_status"] == "Shipped"
    assert order["payment_status"] == "Paid"
    assert email == "jan@example.com"


def test_same_status_is_no_change(db, cod_order):
    _, changes, _ = OrderService(db).update_status(cod_order["id"], delivery_status="Pending")
    assert changes == []


def test_delivered_completes_order_and_locks_it(db, cod_order):
    svc = OrderService(db)
    order, _, _ = svc.update_status(cod_order["id"], delivery_status="Delivered")

    assert order["order_status"] == "Completed"
    assert order["delivered_at"] is not None

    with pytest.raises(LockedState):
        svc.update_status(cod_order["id"], payment_status="Paid")
    with pytest.raises(LockedState):
        svc.update_status(cod_order["id"], delivery_status="Cancelled")

    assert svc.get_order(cod_order["id"], cod_order["user_id"])["payment_status"] == "Pending"


def test_admin_cancel_via_delivery_status(db, cod_order):
    order, changes, _ = OrderService(db).update_status(cod_order["id"], delivery_status="Cancelled")

    assert changes == ["delivery"]
    assert order["order_status"] == "Cancelled"
    assert order["cancelled_at"] is not None


def test_paid_payment_is_locked(db, online_order):
    with pytest.raises(PaymentLocked):
        OrderService(db).update_status(online_order["id"], payment_status="Failed")


def test_unknown_status_value_rejected(db, cod_order):
    with pytest.raises(ValidationError):
        OrderService(db).update_status(cod_order["id"], delivery_status="Teleported")


def test_update_unknown_order(db):
    with pytest.raises(NotFound):
        OrderService(db).update_status(404, delivery_status="Shipped")


def test_cod_cancellation_restores_stock(db, checkout, cod_order):
    assert StockRepo(db).get_available(checkout["stock"].id) == 3

    order, email = OrderService(db).cancel(cod_order["id"], checkout["user"].id)

    assert order["order_status"] == "Cancelled"
    assert order["delivery_status"] == "Cancelled"
    assert order["payment_status"] == "Cancelled"
    assert order["cancelled_at"] is not None
    assert email == "jan@example.com"
    assert StockRepo(db).get_available(checkout["stock"].id) == 5


def test_online_cancellation_marks_refund(db, online_order):
    order, _ = OrderService(db).cancel(online_order["id"], online_order["user_id"])
    assert order["payment_status"] == "Refunded"


def test_cancel_after_shipping_not_allowed(db, checkout, cod_order):
    svc = OrderService(db)
    svc.update_status(cod_order["id"], delivery_status="Shipped")

    with pytest.raises(CancellationNotAllowed):
        svc.cancel(cod_order["id"], checkout["user"].id)

    assert StockRepo(db).get_available(checkout["stock"].id) == 3


def test_cancel_twice_not_allowed(db, checkout, cod_order):
    svc = OrderService(db)
    svc.cancel(cod_order["id"], checkout["user"].id)

    with pytest.raises(CancellationNotAllowed):
        svc.cancel(cod_order["id"], checkout["user"].id)

    assert StockRepo(db).get_available(checkout["stock"].id) == 5


def test_cancel_other_users_order(db, cod_order, make_user):
    other = make_user(name="Anna", email="anna@example.com")
    with pytest.raises(NotFound):
        OrderService(db).cancel(cod_order["id"], other.id)
