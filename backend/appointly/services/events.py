"""
backend/appointly/services/events.py

Event emitter: pushes booking events to a Redis queue for the notification
workers (email / SMS / WhatsApp delivery lives outside this service).

Queue:
- events:p2p (booking_created, booking_rescheduled, booking_status_changed,
  booking_cancelled)
"""

import json
import logging
import time

from redis import Redis, RedisError

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(redis: Redis | None, event_type: str, payload: dict) -> None:
    """
    Emit a booking event.

    Delivery failures are logged and never fail the booking mutation.
    """
    if redis is None:
        logger.debug(f"Event {event_type} dropped: no Redis client")
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis.rpush(P2P_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
