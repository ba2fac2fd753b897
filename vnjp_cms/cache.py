from __future__ import annotations

import json
from typing import Any, Optional

import redis

from vnjp_cms.config import Config


def _debug(msg: str) -> None:
    print(f"[cache] {msg}")


def connect_redis(cfg: Config) -> redis.Redis:
    """Redis client shared by the refresh-token store and the detail caches.

    Like MongoClient, redis-py opens sockets on first command, not here.
    """
    return redis.Redis(
        host=cfg.REDIS_HOST,
        port=int(cfg.REDIS_PORT),
        password=cfg.REDIS_PASSWORD,
        decode_responses=True,
    )


class DetailCache:
    """Assembled "full detail" payloads keyed by `<prefix><parentId>`.

    Entries have no TTL: they live until a write to the parent or one of its
    children calls `invalidate`.
    """

    def __init__(self, client: redis.Redis, prefix: str):
        self._client = client
        self.prefix = prefix

    def key(self, parent_id: Any) -> str:
        return f"{self.prefix}{parent_id}"

    def get(self, parent_id: Any) -> Optional[str]:
        raw = self._client.get(self.key(parent_id))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        _debug(f"hit {self.key(parent_id)}")
        return raw

    def put(self, parent_id: Any, payload: Any) -> str:
        raw = json.dumps(payload, ensure_ascii=False)
        self._client.set(self.key(parent_id), raw)
        return raw

    def invalidate(self, parent_id: Any) -> None:
        n = self._client.delete(self.key(parent_id))
        if n:
            _debug(f"invalidated {self.key(parent_id)}")
