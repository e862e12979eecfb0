import hashlib
import json
import logging
import os
from typing import Optional

import redis

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_TTL = int(os.getenv("CACHE_TTL_SECONDS", "3600"))

# None until first use, and again whenever Redis can't be reached
_client: Optional[redis.Redis] = None


def get_client() -> Optional[redis.Redis]:
    global _client
    if _client is None:
        try:
            _client = redis.from_url(REDIS_URL, decode_responses=True, socket_connect_timeout=2)
            _client.ping()
        except redis.RedisError as exc:
            logger.warning("Redis unavailable, report caching disabled: %s", exc)
            _client = None
    return _client


def _cache_key(params: dict) -> str:
    # the same seed crawled with different options is a different report
    canonical = json.dumps(params, sort_keys=True, default=str)
    return "links:" + hashlib.sha256(canonical.encode()).hexdigest()[:16]


def get_cached_report(params: dict) -> Optional[dict]:
    client = get_client()
    if client is None:
        return None
    try:
        raw = client.get(_cache_key(params))
    except redis.RedisError as exc:
        logger.warning("Cache read error: %s", exc)
        return None
    return json.loads(raw) if raw else None


def cache_report(params: dict, report: dict, ttl: int = CACHE_TTL) -> None:
    client = get_client()
    if client is None:
        return
    try:
        client.setex(_cache_key(params), ttl, json.dumps(report))
    except redis.RedisError as exc:
        logger.warning("Cache write error: %s", exc)


def is_cache_healthy() -> bool:
    client = get_client()
    if client is None:
        return False
    try:
        return bool(client.ping())
    except redis.RedisError:
        return False
