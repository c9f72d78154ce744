# fulfillment/services/email_client.py
import base64

import requests

from fulfillment.utils.retry import http_retry
from fulfillment.utils.settings import MAIL_FROM, SENDGRID_API_KEY, SENDGRID_API_URL, STORE_NAME
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


class EmailClient:
    """Wysylka maili przez SendGrid v3 (mail/send)."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, timeout: int = 10):
        self.api_key = api_key if api_key is not None else SENDGRID_API_KEY
        self.base_url = (base_url or SENDGRID_API_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def fetch_attachment(self, url: str) -> bytes:
        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.content

    @http_retry()
    def send(
        self,
        to: list,
        subject: str,
        text: str,
        attachment: bytes | None = None,
        attachment_name: str | None = None,
    ) -> dict:
        recipients = list(dict.fromkeys(addr for addr in to if addr))
        if not recipients:
            raise ValueError("No recipients")

        payload = {
            "personalizations": [{"to": [{"email": addr} for addr in recipients]}],
            "from": {"email": MAIL_FROM, "name": STORE_NAME},
            "subject": subject,
            "content": [{"type": "text/plain", "value": text}],
        }
        if attachment is not None:
            payload["attachments"] = [{
                "content": base64.b64encode(attachment).decode(),
                "filename": attachment_name or "attachment.pdf",
                "type": "application/pdf",
                "disposition": "attachment",
            }]

        url = f"{self.base_url}/mail/send"
        logger.info(f"EmailClient POST {url} '{subject}' to {len(recipients)} recipients")

        resp = requests.post(
            url,
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return {"sent_to": recipients, "message_id": resp.headers.get("X-Message-Id")}
