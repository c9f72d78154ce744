# fulfillment/celery_worker.py
from celery import Celery

from fulfillment.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    INVOICE_SWEEP_INTERVAL_SECONDS,
)

celery_app = Celery(
    "fulfillment",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski i hooki procesu workera musza byc zaimportowane zeby celery je zarejestrowal
celery_app.conf.imports = (
    "fulfillment.tasks.context",
    "fulfillment.tasks.invoice",
    "fulfillment.tasks.email",
    "fulfillment.tasks.sweep",
)

celery_app.conf.beat_schedule = {
    "sweep-stale-invoices": {
        "task": "fulfillment.tasks.sweep.sweep_stale_invoices_task",
        "schedule": float(INVOICE_SWEEP_INTERVAL_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_acks_late = True
celery_app.conf.worker_prefetch_multiplier = 1
