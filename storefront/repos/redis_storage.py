# storefront/repos/redis_storage.py
from typing import Any

import redis

from storefront.repos.storage_repo import dumps, loads
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class RedisStorage:
    """
    Storage on a redis instance.
    Plain GET/SET/DEL, no EX on purpose: expiry is tracked by the callers in
    separate keys so both backends behave the same.
    """

    def __init__(self, url: str | None = None, prefix: str = "storefront:", client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @redis_retry()
    def read(self, key: str) -> Any | None:
        return loads(key, self.redis.get(self._key(key)))

    @redis_retry()
    def write(self, key: str, value: Any) -> None:
        self.redis.set(name=self._key(key), value=dumps(value))

    @redis_retry()
    def remove(self, key: str) -> None:
        self.redis.delete(self._key(key))
