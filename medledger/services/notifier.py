from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import json
import logging
import redis

from ..core.config import settings
from ..core.database import get_redis
from ..models.notification import Notification

logger = logging.getLogger(__name__)

class Notifier:
    """Per-operation notification outbox.

    ``emit`` writes the event inside the current transaction; ``publish_pending``
    pushes the committed events to the Redis channel in emission order.
    """

    def __init__(self, db: Session, redis_client=None):
        self.db = db
        self.redis = redis_client if redis_client is not None else get_redis()
        self._pending: List[Dict[str, Any]] = []

    def emit(self, event: str, **fields: Any) -> Notification:
        notification = Notification(event=event, payload=fields)
        self.db.add(notification)
        self.db.flush()
        self._pending.append({"id": notification.id, "event": event, **fields})
        return notification

    def discard(self):
        self._pending = []

    def publish_pending(self, channel: Optional[str] = None):
        channel = channel or settings.NOTIFICATION_CHANNEL
        pending, self._pending = self._pending, []

        for message in pending:
            try:
                self.redis.publish(channel, json.dumps(message))
            except redis.RedisError as e:
                # Delivery is best effort; the outbox row is already committed
                logger.warning(f"Failed to publish {message['event']} #{message['id']}: {str(e)}")
