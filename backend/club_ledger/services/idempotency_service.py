"""
Idempotent re-submission of booking requests, backed by Redis.

IDEMPOTENCY STRATEGY
====================

What we store:
  - The JSON body of a successful POST /bookings response
  - Key pattern: "idem:booking:{Idempotency-Key header}"

Why:
  - A customer double-clicking "Buy" or a client retrying after a timeout
    must not create two bookings (and two charges)

Rules:
  - Only successful creations are stored; failures can be retried freely
  - TTL bounds how long a key is remembered (IDEMPOTENCY_TTL)
  - Redis is advisory: when it is disabled or unreachable the header is
    ignored and every request goes to the database (fail-open)
"""

import json
from typing import Optional

import redis.asyncio as redis

from club_ledger.core.config import get_settings
from club_ledger.core.logging import get_logger
from club_ledger.core.metrics import record_idempotency_lookup

logger = get_logger(__name__)
settings = get_settings()

KEY_PREFIX = "idem:booking:"
MAX_KEY_LENGTH = 128

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def make_key(idempotency_key: str) -> Optional[str]:
    key = (idempotency_key or "").strip()
    if not key or len(key) > MAX_KEY_LENGTH:
        return None
    return f"{KEY_PREFIX}{key}"


async def get_cached_response(client: Optional[redis.Redis], idempotency_key: str) -> Optional[dict]:
    key = make_key(idempotency_key)
    if client is None or key is None:
        return None

    try:
        raw = await client.get(key)
    except Exception as e:
        record_idempotency_lookup("error")
        logger.error("idempotency_get_error", key=key, error=str(e))
        return None

    if raw:
        record_idempotency_lookup("hit")
        logger.info("idempotency_hit", key=key)
        return json.loads(raw)

    record_idempotency_lookup("miss")
    return None


async def set_cached_response(
    client: Optional[redis.Redis],
    idempotency_key: str,
    response: dict,
) -> None:
    key = make_key(idempotency_key)
    if client is None or key is None:
        return

    try:
        await client.setex(key, settings.IDEMPOTENCY_TTL, json.dumps(response, default=str))
        logger.debug("idempotency_stored", key=key, ttl=settings.IDEMPOTENCY_TTL)
    except Exception as e:
        logger.error("idempotency_set_error", key=key, error=str(e))


async def get_redis_status() -> dict:
    """Connectivity summary for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        await client.ping()
        return {"status": "connected"}
    except Exception as e:
        return {"status": "error", "error": str(e)}
