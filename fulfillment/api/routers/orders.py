# fulfillment/api/routers/orders.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from fulfillment.api.deps import get_gateway, get_order_events
from fulfillment.data.database import get_db
from fulfillment.domain.schemas import (
    ApiResponse,
    CancelOrderIn,
    CodOrderIn,
    CreatePaymentIn,
    OnlineOrderIn,
    OrderOut,
    OrderStatusUpdate,
    PaymentOrderOut,
)
from fulfillment.services.order_events import OrderEvents
from fulfillment.services.order_service import OrderService

router = APIRouter(prefix="/order", tags=["orders"])


def get_service(db: Session, gateway=None):
    return OrderService(db, gateway=gateway)


@router.post("/cod", response_model=ApiResponse[OrderOut], status_code=201)
def place_cod_order(
    payload: CodOrderIn,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    events: OrderEvents = Depends(get_order_events),
):
    """
    Zamowienie za pobraniem.
    Socket, faktura i maile leca w tle, po wyslaniu odpowiedzi.
    """
    svc = get_service(db)
    order = svc.place_cod_order(
        payload.user_id, payload.address_id, payload.cart_item_ids, payload.charges_id
    )
    background.add_task(events.order_created, order)
    return ApiResponse(data=order, message="Order placed successfully")


@router.post("/online/create-payment", response_model=ApiResponse[PaymentOrderOut])
def create_payment(
    payload: CreatePaymentIn,
    db: Session = Depends(get_db),
    gateway=Depends(get_gateway),
):
    svc = get_service(db, gateway)
    return ApiResponse(
        data=svc.create_payment(payload.user_id, payload.charges_id),
        message="Payment order created",
    )


@router.post("/online/verify", response_model=ApiResponse[OrderOut], status_code=201)
def verify_online_order(
    payload: OnlineOrderIn,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    events: OrderEvents = Depends(get_order_events),
):
    svc = get_service(db)
    order = svc.place_online_order(
        payload.user_id,
        payload.address_id,
        payload.cart_item_ids,
        payload.charges_id,
        payload.remote_order_ref,
        payload.remote_payment_ref,
        payload.signature,
    )
    background.add_task(events.order_created, order)
    return ApiResponse(data=order, message="Payment verified and order placed")


@router.put("/cancel", response_model=ApiResponse[OrderOut])
def cancel_order(
    payload: CancelOrderIn,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    events: OrderEvents = Depends(get_order_events),
):
    svc = get_service(db)
    order, email = svc.cancel(payload.order_id, payload.user_id)
    background.add_task(events.order_cancelled, order, email)
    return ApiResponse(data=order, message="Order cancelled successfully")


@router.put("/{order_id}", response_model=ApiResponse[OrderOut])
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    events: OrderEvents = Depends(get_order_events),
):
    """Zmiana statusu platnosci / dostawy (panel admina)."""
    svc = get_service(db)
    order, changes, email = svc.update_status(
        order_id,
        delivery_status=payload.delivery_status,
        payment_status=payload.payment_status,
    )
    if changes:
        background.add_task(events.order_updated, order, changes, email)
    return ApiResponse(data=order, message="Order updated successfully")


@router.get("", response_model=ApiResponse[List[OrderOut]])
def list_orders(user_id: int = Query(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    return ApiResponse(data=svc.list_orders(user_id), message="Orders fetched successfully")


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(
    order_id: int,
    user_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return ApiResponse(data=svc.get_order(order_id, user_id), message="Order fetched successfully")
