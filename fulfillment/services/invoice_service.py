# fulfillment/services/invoice_service.py
import os
from typing import Any, Dict

from fulfillment.domain.errors import NotFound
from fulfillment.domain.order_state import InvoiceStatus
from fulfillment.domain.projections import invoice_event_payload
from fulfillment.repos.order_repo import OrderRepo
from fulfillment.repos.user_repo import UserRepo
from fulfillment.services.email_templates import invoice_email
from fulfillment.services.invoice_renderer import InvoiceRenderer, invoice_filename
from fulfillment.services.job_queue import JobQueue
from fulfillment.services.notification_service import (
    ADMIN_ROOM,
    ORDER_UPDATED,
    RealtimePublisher,
    user_room,
)
from fulfillment.services.storage_service import ObjectStorage
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


def invoice_key(order_id: int) -> str:
    return f"invoices/{invoice_filename(order_id)}"


class InvoiceProcessor:
    """
    Jeden przebieg joba faktury: render -> upload -> READY -> event -> mail.
    Idempotentny: staly klucz w storage, pola finansowe tylko czytane.
    """

    def __init__(
        self,
        session_factory,
        renderer: InvoiceRenderer,
        storage: ObjectStorage,
        publisher: RealtimePublisher,
        job_queue: JobQueue,
    ):
        self.session_factory = session_factory
        self.renderer = renderer
        self.storage = storage
        self.publisher = publisher
        self.job_queue = job_queue

    def process(self, order_id: int, user_id: int, address_snapshot: Dict[str, Any] | None = None) -> Dict[str, Any]:
        logger.info(f"Generating invoice for order {order_id}")

        db = self.session_factory()
        path = None
        try:
            repo = OrderRepo(db)
            order = repo.get_order(order_id)
            if not order or order.user_id != user_id:
                raise NotFound(f"Order {order_id} not found")

            items = repo.get_items(order.id)
            user = UserRepo(db).get_user(user_id)
            if not user:
                raise NotFound(f"User {user_id} not found")

            path = self.renderer.render(order, items, user, address_snapshot)
            uploaded = self.storage.upload(path, invoice_key(order.id))

            order.invoice_url = uploaded.url
            order.invoice_status = InvoiceStatus.READY.value
            repo.commit()

            logger.info(f"Invoice for order {order.id} ready: {uploaded.url}")

            # po commicie wszystko best-effort, faktura jest juz READY
            self._publish(order)
            recipient = (address_snapshot or {}).get("email") or user.email
            self._send_invoice_email(order, user.name, recipient, uploaded.url)

            return {"order_id": order.id, "invoice_url": uploaded.url}

        except Exception:
            db.rollback()
            raise

        finally:
            db.close()
            if path is not None:
                try:
                    os.remove(path)
                except OSError as e:
                    logger.warning(f"Could not remove invoice file {path}: {e}")

    def mark_failed(self, order_id: int):
        """Po wyczerpaniu prob - FAILED + event, zeby admin widzial problem."""
        db = self.session_factory()
        try:
            repo = OrderRepo(db)
            order = repo.get_order(order_id)
            if not order:
                logger.warning(f"Order {order_id} vanished, cannot mark invoice failed")
                return
            if order.invoice_status == InvoiceStatus.READY.value:
                logger.warning(f"Invoice for order {order_id} already READY, not marking FAILED")
                return
            order.invoice_status = InvoiceStatus.FAILED.value
            repo.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        logger.error(f"Invoice for order {order_id} marked FAILED")
        self._publish(order)

    def _publish(self, order):
        payload = invoice_event_payload(order)
        for room in (ADMIN_ROOM, user_room(order.user_id)):
            try:
                self.publisher.publish(room, ORDER_UPDATED, payload)
            except Exception:
                logger.exception(f"Emit invoice update to {room} for order {order.id} failed")

    def _send_invoice_email(self, order, user_name: str, recipient: str | None, url: str):
        if not recipient:
            logger.warning(f"No email for order {order.id}, skipping invoice email")
            return
        subject, text = invoice_email(user_name, order.id, order.total_payable_amount)
        try:
            self.job_queue.enqueue_email(
                to=[recipient],
                subject=subject,
                text=text,
                attachment_url=url,
                attachment_name=invoice_filename(order.id),
            )
        except Exception:
            logger.exception(f"Enqueue invoice email for order {order.id} failed")
