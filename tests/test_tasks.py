from fulfillment.tasks.email import send_email_task


def test_email_task_fetches_attachment(worker_context):
    client = worker_context.email_client

    result = send_email_task.apply(kwargs={
        "to": ["jan@example.com"],
        "subject": "Invoice - Order 1",
        "text": "hi",
        "attachment_url": "https://storage.test/invoices/Invoice_1.pdf",
        "attachment_name": "Invoice_1.pdf",
    })

    assert result.successful()
    assert client.fetched == ["https://storage.test/invoices/Invoice_1.pdf"]
    assert client.sent[0]["attachment"] == b"%PDF-fake"
    assert client.sent[0]["name"] == "Invoice_1.pdf"


def test_email_task_retries_transient_errors(worker_context):
    client = worker_context.email_client
    client.fail_times = 1

    result = send_email_task.apply(kwargs={"to": ["jan@example.com"], "subject": "s", "text": "t"})

    assert result.successful()
    assert len(client.sent) == 1
    assert client.fetched == []
