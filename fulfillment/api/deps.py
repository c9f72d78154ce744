# fulfillment/api/deps.py
from fastapi import Request

from fulfillment.services.order_events import OrderEvents


def get_gateway(request: Request):
    return request.app.state.gateway


def get_order_events(request: Request) -> OrderEvents:
    return OrderEvents(
        publisher=request.app.state.publisher,
        job_queue=request.app.state.job_queue,
    )
