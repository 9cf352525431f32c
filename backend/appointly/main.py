# backend/appointly/main.py

import logging

from fastapi import FastAPI
from redis import RedisError

from .redis_client import redis_client
from .routers import (
    availability,
    bookings,
    business,
    locations,
    recurring_bookings,
    services,
    slots,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Appointly Booking API")

app.include_router(business.router)
app.include_router(availability.router)
app.include_router(locations.router)
app.include_router(services.router)
app.include_router(bookings.router)
app.include_router(recurring_bookings.router)
app.include_router(slots.router)


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        redis_ok = False
    return {"status": "ok", "redis": redis_ok}
