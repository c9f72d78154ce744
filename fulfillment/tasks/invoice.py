# fulfillment/tasks/invoice.py
from fulfillment.celery_worker import celery_app
from fulfillment.services.job_queue import INVOICE_TASK
from fulfillment.tasks.context import get_worker_context
from fulfillment.utils.retry import backoff_countdown
from fulfillment.utils.settings import INVOICE_BACKOFF_SECONDS, INVOICE_MAX_ATTEMPTS
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(
    name=INVOICE_TASK,
    bind=True,
    acks_late=True,
    reject_on_worker_lost=True,
    max_retries=INVOICE_MAX_ATTEMPTS - 1,
)
def generate_invoice_task(self, order_id: int, user_id: int, address_snapshot: dict | None = None):
    context = get_worker_context()
    attempt = self.request.retries + 1

    try:
        return context.invoices.process(order_id, user_id, address_snapshot)

    except Exception as exc:
        if self.request.retries >= self.max_retries:
            logger.exception(f"Invoice for order {order_id} failed after {attempt} attempts")
            context.invoices.mark_failed(order_id)
            raise

        countdown = backoff_countdown(self.request.retries, INVOICE_BACKOFF_SECONDS)
        logger.warning(
            f"Invoice for order {order_id} failed (attempt {attempt}/{INVOICE_MAX_ATTEMPTS}): {exc}, "
            f"retry in {countdown}s"
        )
        raise self.retry(exc=exc, countdown=countdown)
