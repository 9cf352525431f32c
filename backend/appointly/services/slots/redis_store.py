# backend/appointly/services/slots/redis_store.py
"""
Per-business cache of the level 1 slot grid.

One sorted set per business and day, slots:day:{business_id}:{date}.
Members are "HH:MM" starts; the score is the moment the start stops
satisfying the business's advance-notice rule, so a read with
ZRANGEBYSCORE now..+inf returns only starts that are still bookable.

A day with no starts at all holds a single EMPTY_SENTINEL member, which
tells "closed or fully expired" apart from "never calculated".
"""

from datetime import date, datetime
from redis import Redis

from .config import SlotsConfig, get_slots_config


EMPTY_SENTINEL = "__empty__"

DayGrid = list[tuple[str, float]]


def _decode(member) -> str:
    return member.decode() if isinstance(member, bytes) else member


def _bookable(members) -> list[str]:
    return sorted(m for m in map(_decode, members) if m != EMPTY_SENTINEL)


class SlotsRedisStore:
    KEY_PREFIX = "slots:day"

    def __init__(self, redis: Redis, config: SlotsConfig | None = None):
        self.redis = redis
        self.config = config or get_slots_config()

    def _key(self, business_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{business_id}:{dt.isoformat()}"

    def _expire_at(self, dt: date, grid: DayGrid) -> int:
        # Never outlive the last start, nor the configured TTL
        if grid:
            last_useful = max(expire_ts for _, expire_ts in grid)
        else:
            last_useful = datetime.combine(dt, datetime.max.time()).timestamp()
        ttl_cap = datetime.now().timestamp() + self.config.cache_ttl_seconds
        return int(min(last_useful + 60, ttl_cap))

    def write_days(self, business_id: int, grids: dict[date, DayGrid]) -> None:
        """Replace the cached grid of each given day in one round trip."""
        if not grids:
            return

        pipe = self.redis.pipeline()
        for dt, grid in grids.items():
            key = self._key(business_id, dt)
            members = dict(grid) if grid else {EMPTY_SENTINEL: 0}
            pipe.delete(key)
            pipe.zadd(key, members)
            pipe.expireat(key, self._expire_at(dt, grid))
        pipe.execute()

    def read_days(
        self,
        business_id: int,
        dates: list[date],
        now: datetime,
    ) -> dict[date, list[str] | None]:
        """
        Still-bookable "HH:MM" starts per day, sorted.

        A day that was never written (or has expired) maps to None.
        """
        if not dates:
            return {}

        now_ts = now.timestamp()
        pipe = self.redis.pipeline()
        for dt in dates:
            key = self._key(business_id, dt)
            pipe.exists(key)
            pipe.zrangebyscore(key, now_ts, "+inf")
        replies = pipe.execute()

        result: dict[date, list[str] | None] = {}
        for i, dt in enumerate(dates):
            cached, members = replies[2 * i], replies[2 * i + 1]
            result[dt] = _bookable(members) if cached else None
        return result

    def drop_days(self, business_id: int, dates: list[date] | None = None) -> int:
        """Delete the given days, or every cached day of the business."""
        if dates:
            keys = [self._key(business_id, dt) for dt in dates]
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:{business_id}:*"))

        return self.redis.delete(*keys) if keys else 0
