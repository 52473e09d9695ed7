"""Redis-backed key-value store."""

import logging
from typing import Optional

import redis

from journal_prompts.config import REDIS_URL
from journal_prompts.errors import StoreUnavailable
from journal_prompts.stores.base import KeyValueStore

logger = logging.getLogger(__name__)


class RedisStore(KeyValueStore):
    """Stores values as plain Redis strings."""

    def __init__(self, url: str = REDIS_URL, client: Optional[redis.Redis] = None):
        self.client = client or redis.Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            raise StoreUnavailable(f"Failed to read {key}: {e}") from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            raise StoreUnavailable(f"Failed to write {key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise StoreUnavailable(f"Failed to remove {key}: {e}") from e
