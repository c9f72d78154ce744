# fulfillment/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from fulfillment.api.errors import register_exception_handlers
from fulfillment.api.routers import carts, events, health, orders
from fulfillment.celery_worker import celery_app
from fulfillment.data.database import Base, engine
from fulfillment.services.job_queue import JobQueue
from fulfillment.services.notification_service import RealtimePublisher
from fulfillment.services.payment_service import PaymentGatewayClient
from fulfillment.utils.logging import get_logger

# import wszystkich modeli przed create_all
from fulfillment.data import models  # noqa: F401

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Registering tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)

    app.state.publisher.init()
    app.state.job_queue.init()
    logger.info("Fulfillment service started")

    yield

    app.state.job_queue.shutdown()
    app.state.publisher.shutdown()
    logger.info("Fulfillment service stopped")


def create_app(publisher=None, job_queue=None, gateway=None) -> FastAPI:
    app = FastAPI(
        title="Fulfillment Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.publisher = publisher or RealtimePublisher()
    app.state.job_queue = job_queue or JobQueue(celery_app)
    app.state.gateway = gateway or PaymentGatewayClient()

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(events.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
