# fulfillment/services/notification_service.py
import json

import redis
from redis.exceptions import RedisError

from fulfillment.utils.settings import REDIS_URL
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)

ADMIN_ROOM = "ADMIN"

ORDER_CREATED = "ORDER_CREATED"
ORDER_UPDATED = "ORDER_UPDATED"


def user_room(user_id: int) -> str:
    return f"USER_{user_id}"


class RealtimePublisher:
    """
    Publikacja zdarzen zamowien na kanaly redis pub/sub (ADMIN, USER_<id>).
    Best-effort, at-most-once: bez retry i bez kolejki.
    Zrodlem prawdy jest zawsze zamowienie w bazie.
    """

    def __init__(self, url: str | None = None):
        self.url = url or REDIS_URL
        self.redis = None

    def init(self):
        self.redis = redis.Redis.from_url(self.url, decode_responses=True)
        logger.info("Realtime publisher initialized")

    def shutdown(self):
        if self.redis is not None:
            self.redis.close()
            self.redis = None
            logger.info("Realtime publisher closed")

    def publish(self, room: str, event: str, payload: dict) -> bool:
        if self.redis is None:
            raise RuntimeError("Realtime publisher not initialized")
        message = json.dumps({"event": event, "payload": payload}, default=str)
        try:
            receivers = self.redis.publish(room, message)
        except RedisError as e:
            logger.warning(f"Publish {event} to {room} failed: {e}")
            return False
        logger.info(f"Published {event} to {room} ({receivers} receivers)")
        return True
