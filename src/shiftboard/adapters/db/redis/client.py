"""
Redis client construction.

The client is built explicitly from ``RedisSettings`` and handed to
``RedisStore``; nothing in the package keeps a module-level connection.
"""

import logging

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from ....core.config import RedisSettings

logger = logging.getLogger(__name__)


def create_redis_client(config: RedisSettings) -> Redis:
    """Create an asyncio Redis client with bounded exponential-backoff retries.

    Connections are opened lazily on the first command.
    """
    retry = Retry(
        ExponentialBackoff(cap=config.retry_cap_seconds, base=config.retry_base_seconds),
        config.max_retries,
    )
    client = Redis.from_url(
        config.url,
        decode_responses=True,
        socket_timeout=config.socket_timeout,
        retry=retry,
        retry_on_error=[ConnectionError, TimeoutError],
        health_check_interval=30,
    )
    logger.info(
        "Redis client configured: max_retries=%s, backoff_cap=%ss",
        config.max_retries,
        config.retry_cap_seconds,
    )
    return client


async def ping(client: Redis) -> bool:
    """Return True when the server answers PING."""
    try:
        return bool(await client.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
