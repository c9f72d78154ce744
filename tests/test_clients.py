import base64
import threading
import time
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
import requests
from botocore.exceptions import ClientError

from fulfillment.services.email_client import EmailClient
from fulfillment.services.job_queue import EMAIL_TASK, INVOICE_TASK, JobQueue
from fulfillment.services.storage_service import ObjectStorage


def test_storage_upload_uses_fixed_key(tmp_path):
    pdf = tmp_path / "Invoice_7.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    client = MagicMock()

    result = ObjectStorage(bucket="invoices-bucket", client=client).upload(pdf, "invoices/Invoice_7.pdf")

    client.upload_file.assert_called_once_with(
        str(pdf), "invoices-bucket", "invoices/Invoice_7.pdf", ExtraArgs={"ContentType": "application/pdf"}
    )
    assert result.key == "invoices/Invoice_7.pdf"
    assert result.url.endswith("/invoices/Invoice_7.pdf")


def test_storage_delete_reports_client_errors():
    client = MagicMock()
    client.delete_object.side_effect = ClientError({"Error": {"Code": "AccessDenied"}}, "DeleteObject")

    assert ObjectStorage(bucket="b", client=client).delete("invoices/x.pdf") is False


def test_job_queue_requires_init():
    with pytest.raises(RuntimeError):
        JobQueue(MagicMock()).enqueue_invoice(1, 2, {})


def test_job_queue_sends_named_tasks():
    app = MagicMock()
    app.send_task.return_value.id = "job-1"
    queue = JobQueue(app)
    queue.init()

    assert queue.enqueue_invoice(1, 2, None) == "job-1"
    queue.enqueue_email(["a@example.com"], "s", "t", attachment_url="https://x/y.pdf")

    invoice_call, email_call = app.send_task.call_args_list
    assert invoice_call.args == (INVOICE_TASK,)
    assert invoice_call.kwargs["kwargs"] == {"order_id": 1, "user_id": 2, "address_snapshot": {}}
    assert invoice_call.kwargs["producer"] is app.producer_pool.acquire.return_value.__enter__.return_value
    app.producer_pool.acquire.assert_called_with(block=True)
    assert email_call.args == (EMAIL_TASK,)
    assert email_call.kwargs["kwargs"]["attachment_url"] == "https://x/y.pdf"

    queue.shutdown()
    app.producer_pool.force_close_all.assert_called_once()


class _ProducerPool:
    """Pula jak w kombu: acquire oddaje producenta na wylacznosc do czasu release."""

    def __init__(self):
        self.lock = threading.Lock()
        self.in_use = set()
        self.created = 0

    @contextmanager
    def acquire(self, block=True):
        with self.lock:
            self.created += 1
            producer = f"producer-{self.created}"
            self.in_use.add(producer)
        try:
            yield producer
        finally:
            with self.lock:
                self.in_use.discard(producer)

    def force_close_all(self):
        pass


def test_job_queue_concurrent_sends_use_separate_producers():
    pool = _ProducerPool()
    used = []
    start = threading.Barrier(8)

    def send_task(name, kwargs, producer, **options):
        # producent wypozyczony na czas wysylki
        assert producer in pool.in_use
        used.append(producer)
        time.sleep(0.01)
        return MagicMock(id=kwargs["order_id"])

    app = MagicMock()
    app.producer_pool = pool
    app.send_task.side_effect = send_task
    queue = JobQueue(app)
    queue.init()
    results = []

    def worker(order_id):
        start.wait()
        results.append(queue.enqueue_invoice(order_id, 1, {}))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == list(range(8))
    assert len(set(used)) == 8
    assert pool.in_use == set()


def test_email_client_builds_sendgrid_payload(monkeypatch):
    captured = {}

    class _Resp:
        headers = {"X-Message-Id": "m-1"}

        def raise_for_status(self):
            pass

    def fake_post(url, json, headers, timeout):
        captured.update(url=url, json=json, headers=headers)
        return _Resp()

    monkeypatch.setattr(requests, "post", fake_post)
    client = EmailClient(api_key="key", base_url="https://mail.test/v3")

    result = client.send(
        ["jan@example.com", "jan@example.com"], "Invoice", "body",
        attachment=b"%PDF", attachment_name="Invoice_1.pdf",
    )

    assert captured["url"] == "https://mail.test/v3/mail/send"
    assert captured["headers"]["Authorization"] == "Bearer key"
    assert captured["json"]["personalizations"] == [{"to": [{"email": "jan@example.com"}]}]
    [attachment] = captured["json"]["attachments"]
    assert base64.b64decode(attachment["content"]) == b"%PDF"
    assert attachment["filename"] == "Invoice_1.pdf"
    assert result == {"sent_to": ["jan@example.com"], "message_id": "m-1"}


def test_email_client_needs_recipient():
    with pytest.raises(ValueError):
        EmailClient(api_key="key").send([None, ""], "s", "t")
