# fulfillment/api/routers/events.py
import asyncio

import redis.asyncio as aioredis
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from fulfillment.services.notification_service import ADMIN_ROOM, user_room
from fulfillment.utils.settings import REDIS_URL
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["events"])


async def _forward(websocket: WebSocket, pubsub):
    async for message in pubsub.listen():
        if message.get("type") != "message":
            continue
        await websocket.send_text(message["data"])


@router.websocket("/ws/orders")
async def orders_feed(websocket: WebSocket, user_id: int | None = None, admin: bool = False):
    """
    Przekazuje zdarzenia zamowien z kanalu redis do klienta.
    ?admin=true -> pokoj ADMIN, ?user_id=<id> -> pokoj USER_<id>.
    """
    if not admin and user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    room = ADMIN_ROOM if admin else user_room(user_id)
    await websocket.accept()

    client = aioredis.from_url(REDIS_URL, encoding="utf-8", decode_responses=True)
    pubsub = client.pubsub()
    await pubsub.subscribe(room)
    logger.info(f"Websocket subscribed to {room}")

    forward = asyncio.create_task(_forward(websocket, pubsub))
    try:
        while True:
            # klient nic nie wysyla, receive sluzy do wykrycia rozlaczenia
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Websocket for {room} disconnected")
    finally:
        forward.cancel()
        await pubsub.unsubscribe(room)
        await pubsub.aclose()
        await client.aclose()
