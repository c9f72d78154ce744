# fulfillment/tasks/sweep.py
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from fulfillment.celery_worker import celery_app
from fulfillment.domain.projections import project_address
from fulfillment.repos.order_repo import OrderRepo
from fulfillment.services.job_queue import JobQueue
from fulfillment.tasks.context import get_worker_context
from fulfillment.utils.settings import INVOICE_STALE_AFTER_SECONDS
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


def requeue_stale_invoices(db: Session, job_queue: JobQueue, now: datetime | None = None) -> int:
    """Ponowne joby dla zamowien ktore utknely w PENDING (np. enqueue po commicie sie nie udal)."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(seconds=INVOICE_STALE_AFTER_SECONDS)

    orders = OrderRepo(db).stale_pending_invoices(cutoff)
    logger.info(f"Found {len(orders)} orders with stale pending invoice")

    requeued = 0
    for order in orders:
        try:
            job_queue.enqueue_invoice(order.id, order.user_id, project_address(order.address))
            requeued += 1
        except Exception as e:
            logger.warning(f"Requeue invoice for order {order.id} failed: {e}")
    return requeued


@celery_app.task(name="fulfillment.tasks.sweep.sweep_stale_invoices_task")
def sweep_stale_invoices_task():
    logger.info("Sweep stale invoices task started")

    context = get_worker_context()
    db = context.session_factory()
    try:
        return requeue_stale_invoices(db, context.job_queue)
    finally:
        db.close()
