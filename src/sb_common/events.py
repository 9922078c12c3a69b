"""Post-commit domain events over Redis pub/sub.

Events are published only after the transaction that produced them has
committed. Delivery is best-effort: a Redis outage is logged and swallowed,
the committed ledger state is unaffected.

Message format on settings.EVENTS_CHANNEL:
    {"type": "settlement.completed", "payload": {...}, "ts": "<ISO8601>"}
"""

import json
import logging
from typing import Any

from redis.exceptions import RedisError

from config.settings import settings
from src.sb_common.datetime_utils import utc_now
from src.sb_common.redis_client import get_redis

logger = logging.getLogger(__name__)

SETTLEMENT_COMPLETED = "settlement.completed"
FUNDS_GRANTED = "funds.granted"


def build_event(event_type: str, payload: dict[str, Any]) -> str:
    return json.dumps(
        {"type": event_type, "payload": payload, "ts": utc_now().isoformat()},
        default=str,
    )


async def publish_event(event_type: str, payload: dict[str, Any]) -> None:
    """Publish one event. Never raises on Redis failure."""
    message = build_event(event_type, payload)
    try:
        redis = await get_redis()
        await redis.publish(settings.EVENTS_CHANNEL, message)
    except (RedisError, OSError) as exc:
        logger.warning("Event %s not published: %s", event_type, exc)
