# fulfillment/services/order_events.py
from typing import Any, Dict, Iterable

from fulfillment.domain.projections import event_payload
from fulfillment.services.email_templates import (
    delivery_status_email,
    order_cancelled_email,
    payment_status_email,
)
from fulfillment.services.job_queue import JobQueue
from fulfillment.services.notification_service import (
    ADMIN_ROOM,
    ORDER_CREATED,
    ORDER_UPDATED,
    RealtimePublisher,
    user_room,
)
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)

_STATUS_EMAILS = {
    "payment": payment_status_email,
    "delivery": delivery_status_email,
}


class OrderEvents:
    """
    Skutki uboczne po commicie zamowienia, odpalane jako background task
    po wyslaniu odpowiedzi. Kazdy krok ma wlasny try/except - blad tutaj
    nigdy nie cofa zlozonego zamowienia.
    """

    def __init__(self, publisher: RealtimePublisher, job_queue: JobQueue):
        self.publisher = publisher
        self.job_queue = job_queue

    def order_created(self, order: Dict[str, Any]):
        self._emit(order, ORDER_CREATED)
        try:
            self.job_queue.enqueue_invoice(order["id"], order["user_id"], order.get("address"))
        except Exception:
            #sweeper podejmie zamowienie z invoice_status PENDING
            logger.exception(f"Enqueue invoice job for order {order['id']} failed")

    def order_updated(self, order: Dict[str, Any], changes: Iterable[str], email: str | None):
        self._emit(order, ORDER_UPDATED)
        for change in changes:
            self._send_email(email, _STATUS_EMAILS[change](order), order["id"])

    def order_cancelled(self, order: Dict[str, Any], email: str | None):
        self._emit(order, ORDER_UPDATED)
        self._send_email(email, order_cancelled_email(order), order["id"])

    def _emit(self, order: Dict[str, Any], event: str):
        payload = event_payload(order)
        for room in (ADMIN_ROOM, user_room(order["user_id"])):
            try:
                self.publisher.publish(room, event, payload)
            except Exception:
                logger.exception(f"Emit {event} to {room} for order {order['id']} failed")

    def _send_email(self, email: str | None, template, order_id: int):
        if not email:
            logger.warning(f"No email for order {order_id}, skipping notification")
            return
        subject, text = template
        try:
            self.job_queue.enqueue_email(to=[email], subject=subject, text=text)
        except Exception:
            logger.exception(f"Enqueue email '{subject}' for order {order_id} failed")
