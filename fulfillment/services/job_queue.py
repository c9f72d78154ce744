# fulfillment/services/job_queue.py
from celery import Celery

from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)

INVOICE_TASK = "fulfillment.tasks.invoice.generate_invoice_task"
EMAIL_TASK = "fulfillment.tasks.email.send_email_task"


class JobQueue:
    """
    Producent jobow do celery. Wysyla przez pule producentow aplikacji,
    kazde wywolanie bierze wlasnego producenta (bezpieczne dla watkow threadpoola).
    init() przed pierwszym uzyciem, shutdown() przy zamykaniu procesu.
    """

    def __init__(self, app: Celery):
        self.app = app
        self._producers = None

    def init(self):
        self._producers = self.app.producer_pool
        logger.info("Job queue initialized")

    def shutdown(self):
        if self._producers is not None:
            self._producers.force_close_all()
            self._producers = None
            logger.info("Job queue closed")

    def _send(self, name: str, kwargs: dict):
        if self._producers is None:
            raise RuntimeError("Job queue not initialized")
        with self._producers.acquire(block=True) as producer:
            return self.app.send_task(
                name,
                kwargs=kwargs,
                producer=producer,
                retry=True,
                retry_policy={"max_retries": 3, "interval_start": 0.2, "interval_step": 0.5},
            )

    def enqueue_invoice(self, order_id: int, user_id: int, address_snapshot: dict | None):
        result = self._send(
            INVOICE_TASK,
            {"order_id": order_id, "user_id": user_id, "address_snapshot": address_snapshot or {}},
        )
        logger.info(f"Invoice job {result.id} enqueued for order {order_id}")
        return result.id

    def enqueue_email(
        self,
        to: list,
        subject: str,
        text: str,
        attachment_url: str | None = None,
        attachment_name: str | None = None,
    ):
        result = self._send(
            EMAIL_TASK,
            {
                "to": to,
                "subject": subject,
                "text": text,
                "attachment_url": attachment_url,
                "attachment_name": attachment_name,
            },
        )
        logger.info(f"Email job {result.id} enqueued: {subject}")
        return result.id
