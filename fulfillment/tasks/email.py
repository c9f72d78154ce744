# fulfillment/tasks/email.py
import requests

from fulfillment.celery_worker import celery_app
from fulfillment.services.job_queue import EMAIL_TASK
from fulfillment.tasks.context import get_worker_context
from fulfillment.utils.settings import INVOICE_BACKOFF_SECONDS
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(
    name=EMAIL_TASK,
    acks_late=True,
    autoretry_for=(requests.RequestException,),
    retry_backoff=INVOICE_BACKOFF_SECONDS,
    max_retries=2,
)
def send_email_task(
    to: list,
    subject: str,
    text: str,
    attachment_url: str | None = None,
    attachment_name: str | None = None,
):
    client = get_worker_context().email_client

    attachment = None
    if attachment_url:
        attachment = client.fetch_attachment(attachment_url)

    result = client.send(
        to=to,
        subject=subject,
        text=text,
        attachment=attachment,
        attachment_name=attachment_name,
    )
    logger.info(f"Email '{subject}' sent to {result['sent_to']}")
    return result
