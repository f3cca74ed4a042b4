import redis
from typing import Any, Dict, Optional, Union

from dreampath.core.config import settings
from dreampath.services.logger import logger


class InMemoryRedis:
    """Dict-backed stand-in for the handful of redis commands the app uses.

    Used when REDIS_URL is empty or Redis cannot be reached, so the local data
    store and the insights cache keep working for the lifetime of the process.
    """

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: Any, *args: Any, **kwargs: Any) -> bool:
        self._data[key] = value if isinstance(value, str) else str(value)
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                removed += 1
        return removed

    def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self._data)

    def flushdb(self) -> bool:
        self._data.clear()
        return True

    def ping(self) -> bool:
        return True


KeyValueClient = Union[redis.Redis, InMemoryRedis]

_redis_client: Optional[KeyValueClient] = None


def get_redis_client() -> KeyValueClient:
    """
    Lazily initialize and return the shared key-value client. Falls back to an
    in-memory instance when Redis is not configured or unavailable so callers
    can continue gracefully.
    """

    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = settings.REDIS_URL
    if not redis_url:
        _redis_client = InMemoryRedis()
        return _redis_client

    try:
        client = redis.from_url(redis_url, decode_responses=True)
        client.ping()
        _redis_client = client
    except Exception as exc:
        logger.warning(
            f"Redis connection failed ({exc}). Falling back to in-memory store."
        )
        _redis_client = InMemoryRedis()

    return _redis_client


def set_redis_client(client: Optional[KeyValueClient]) -> None:
    """Replace the shared client (tests, alternate wiring). None forces re-init."""
    global _redis_client
    _redis_client = client
