"""
Pytest fixtures for the fulfillment service.

Every test gets its own file-backed SQLite database, so several sessions
(threads, a rival checkout) can contend on the same rows.
"""
import os
import tempfile

# srodowisko testowe zanim zaimportujemy moduly aplikacji
_TMP = tempfile.mkdtemp(prefix="fulfillment-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/app.db"
os.environ["PAYMENT_KEY_SECRET"] = "test-secret"
os.environ["PAYMENT_KEY_ID"] = "rzp_test_key"
os.environ["INVOICE_DIR"] = os.path.join(_TMP, "invoices")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fulfillment.data.database import Base
from fulfillment.data.models import AddressModel, StockRecordModel, UserModel
from fulfillment.services.cart_service import CartService
from fulfillment.services.invoice_renderer import InvoiceRenderer
from fulfillment.tasks.context import WorkerContext, set_worker_context
from tests.fakes import FakeEmailClient, FakePublisher, FakeQueue, FakeStorage


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(name="Jan Kowalski", email="jan@example.com"):
        user = UserModel(name=name, email=email)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_address(db):
    def _make(user, **overrides):
        data = {
            "user_id": user.id,
            "name": user.name,
            "email": user.email,
            "phone": "9999999999",
            "address": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
        }
        data.update(overrides)
        address = AddressModel(**data)
        db.add(address)
        db.commit()
        return address
    return _make


@pytest.fixture
def make_stock(db):
    def _make(variant_id=1, size="M", available=10, actual_price="300.00", offer_price="250.00"):
        stock = StockRecordModel(
            variant_id=variant_id,
            size=size,
            available=available,
            actual_price=Decimal(actual_price),
            offer_price=Decimal(offer_price),
        )
        db.add(stock)
        db.commit()
        return stock
    return _make


@pytest.fixture
def fill_cart(session_factory):
    """Dodaje pozycje przez CartService, zeby snapshot oplat byl przeliczony jak w produkcji."""
    def _fill(user, *lines):
        session = session_factory()
        try:
            svc = CartService(session)
            items = [
                svc.add_item(user.id, stock.variant_id, stock.id, quantity)
                for stock, quantity in lines
            ]
            charges = svc.get_charges(user.id)
        finally:
            session.close()
        return items, charges
    return _fill


@pytest.fixture
def checkout(make_user, make_address, make_stock, fill_cart):
    """Uzytkownik z adresem i jedna pozycja w koszyku (2 x 250)."""
    user = make_user()
    address = make_address(user)
    stock = make_stock(available=5)
    items, charges = fill_cart(user, (stock, 2))
    return {
        "user": user,
        "address": address,
        "stock": stock,
        "cart_item_ids": [i["id"] for i in items],
        "charges_id": charges["id"],
    }


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def job_queue():
    return FakeQueue()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def worker_context(session_factory, publisher, job_queue, storage, tmp_path):
    context = WorkerContext(
        session_factory=session_factory,
        publisher=publisher,
        job_queue=job_queue,
        storage=storage,
        renderer=InvoiceRenderer(tmp_path / "invoices"),
        email_client=FakeEmailClient(),
    )
    set_worker_context(context)
    yield context
    set_worker_context(None)
