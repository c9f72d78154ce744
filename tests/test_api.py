from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from fulfillment.data.database import get_db
from fulfillment.main import create_app
from fulfillment.services.payment_service import PaymentVerifier
from tests.fakes import FakeGateway, FakePublisher, FakeQueue


@pytest.fixture
def app(session_factory):
    app = create_app(publisher=FakePublisher(), job_queue=FakeQueue(), gateway=FakeGateway())

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_cart_flow(client, make_user, make_stock):
    user = make_user()
    stock = make_stock(available=5)

    resp = client.post(
        f"/cart?user_id={user.id}",
        json={"variant_id": stock.variant_id, "stock_record_id": stock.id, "quantity": 2},
    )
    assert resp.status_code == 201
    item_id = resp.json()["data"]["id"]

    resp = client.put(f"/cart/{item_id}?user_id={user.id}", json={"quantity": 3})
    assert resp.json()["data"]["quantity"] == 3

    charges = client.get(f"/cart/charges?user_id={user.id}").json()["data"]
    assert Decimal(charges["total_payable_amount"]) == Decimal("768")

    cart = client.get(f"/cart?user_id={user.id}").json()["data"]
    assert [i["id"] for i in cart["items"]] == [item_id]

    resp = client.delete(f"/cart/{item_id}?user_id={user.id}")
    assert resp.json()["data"]["charges"] is None
    assert client.get(f"/cart/charges?user_id={user.id}").status_code == 404


def test_insufficient_stock_envelope(client, make_user, make_stock):
    user = make_user()
    stock = make_stock(available=1)

    resp = client.post(
        f"/cart?user_id={user.id}",
        json={"variant_id": stock.variant_id, "stock_record_id": stock.id, "quantity": 3},
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "data": None, "message": "Only 1 items available in stock"}


def test_request_validation_is_400(client):
    resp = client.post("/order/cod", json={"user_id": 1, "address_id": 1, "cart_item_ids": [], "charges_id": 1})
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "cart_item_ids" in resp.json()["message"]


def test_cod_order_dispatches_side_effects(app, client, checkout):
    resp = client.post("/order/cod", json={
        "user_id": checkout["user"].id,
        "address_id": checkout["address"].id,
        "cart_item_ids": checkout["cart_item_ids"],
        "charges_id": checkout["charges_id"],
    })

    assert resp.status_code == 201
    order = resp.json()["data"]
    assert order["payment_status"] == "Pending"

    # background tasks poszly po odpowiedzi
    assert [job["order_id"] for job in app.state.job_queue.invoices] == [order["id"]]
    assert [m[1] for m in app.state.publisher.messages] == ["ORDER_CREATED", "ORDER_CREATED"]


def test_online_flow(app, client, checkout):
    resp = client.post("/order/online/create-payment", json={
        "user_id": checkout["user"].id,
        "charges_id": checkout["charges_id"],
    })
    payment = resp.json()["data"]
    assert payment["amount"] == 56800

    forged = client.post("/order/online/verify", json={
        "user_id": checkout["user"].id,
        "address_id": checkout["address"].id,
        "cart_item_ids": checkout["cart_item_ids"],
        "charges_id": checkout["charges_id"],
        "remote_order_ref": payment["remote_order_ref"],
        "remote_payment_ref": "pay_1",
        "signature": "forged",
    })
    assert forged.status_code == 400
    assert forged.json()["message"] == "Payment verification failed"

    signature = PaymentVerifier().signature_for(payment["remote_order_ref"], "pay_1")
    resp = client.post("/order/online/verify", json={
        "user_id": checkout["user"].id,
        "address_id": checkout["address"].id,
        "cart_item_ids": checkout["cart_item_ids"],
        "charges_id": checkout["charges_id"],
        "remote_order_ref": payment["remote_order_ref"],
        "remote_payment_ref": "pay_1",
        "signature": signature,
    })
    assert resp.status_code == 201
    assert resp.json()["data"]["payment_status"] == "Paid"


def test_status_update_and_cancel(app, client, checkout):
    order = client.post("/order/cod", json={
        "user_id": checkout["user"].id,
        "address_id": checkout["address"].id,
        "cart_item_ids": checkout["cart_item_ids"],
        "charges_id": checkout["charges_id"],
    }).json()["data"]

    resp = client.put(f"/order/{order['id']}", json={"delivery_status": "Processing"})
    assert resp.status_code == 200
    assert resp.json()["data"]["delivery_status"] == "Processing"
    assert app.state.job_queue.emails[-1]["subject"] == "Delivery Status Updated"

    resp = client.put(f"/order/{order['id']}", json={"delivery_status": "Bogus"})
    assert resp.status_code == 400

    resp = client.put("/order/cancel", json={"order_id": order["id"], "user_id": checkout["user"].id})
    assert resp.status_code == 200
    assert resp.json()["data"]["order_status"] == "Cancelled"

    resp = client.put("/order/cancel", json={"order_id": order["id"], "user_id": checkout["user"].id})
    assert resp.status_code == 409

    resp = client.put(f"/order/{order['id']}", json={"payment_status": "Paid"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Order is completed and cannot be updated"


def test_order_reads(client, checkout):
    order = client.post("/order/cod", json={
        "user_id": checkout["user"].id,
        "address_id": checkout["address"].id,
        "cart_item_ids": checkout["cart_item_ids"],
        "charges_id": checkout["charges_id"],
    }).json()["data"]

    listed = client.get(f"/order?user_id={checkout['user'].id}").json()["data"]
    assert [o["id"] for o in listed] == [order["id"]]
    assert listed[0]["items"][0]["quantity"] == 2

    detail = client.get(f"/order/{order['id']}?user_id={checkout['user'].id}")
    assert detail.status_code == 200
    assert detail.json()["data"]["address"]["pincode"] == "560001"

    assert client.get(f"/order/{order['id']}?user_id=999").status_code == 404


def test_websocket_requires_room(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/orders") as ws:
            ws.receive_text()
