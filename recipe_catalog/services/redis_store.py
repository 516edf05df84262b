"""
Redis-backed KV store.
Keys live under a namespace prefix; values are JSON-encoded strings.
"""

import json
import logging
import re
import time
from typing import Any, List, Optional, Tuple

import redis

from recipe_catalog.core.errors import StorageError
from recipe_catalog.services.prometheus_metrics import (
    record_kv_error,
    record_kv_operation,
    record_scan_duration,
)

logger = logging.getLogger(__name__)

BACKEND = "redis"
DEFAULT_NAMESPACE = "catalog:"
SCAN_BATCH = 500

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(text: str) -> str:
    """Escape Redis MATCH metacharacters so a key prefix matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisKeyValueStore:
    """Redis KV store implementing KeyValueStore."""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        namespace: str = DEFAULT_NAMESPACE,
        client: Optional[Any] = None,
    ) -> None:
        self._namespace = namespace
        self._client = client if client is not None else redis.from_url(
            url, decode_responses=True
        )

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def _call(self, operation: str, fn, *args, **kwargs):
        record_kv_operation(BACKEND, operation)
        try:
            return fn(*args, **kwargs)
        except redis.RedisError as e:
            record_kv_error(BACKEND, operation)
            logger.error("Redis %s failed: %s", operation, e)
            raise StorageError("storage unavailable") from e

    def _decode(self, key: str, raw: str) -> dict[str, Any]:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"corrupt value under {key}: {e.msg}") from e

    def get(self, key: str) -> Optional[dict[str, Any]]:
        raw = self._call("get", self._client.get, self._full_key(key))
        if raw is None:
            return None
        return self._decode(key, raw)

    def set(self, key: str, value: dict[str, Any]) -> None:
        self._call("set", self._client.set, self._full_key(key), json.dumps(value))

    def delete(self, key: str) -> bool:
        return self._call("delete", self._client.delete, self._full_key(key)) > 0

    def scan_prefix(self, prefix: str) -> List[Tuple[str, dict[str, Any]]]:
        start = time.perf_counter()
        pattern = escape_glob(self._full_key(prefix)) + "*"
        full_keys = sorted(
            self._call(
                "scan",
                lambda: list(self._client.scan_iter(match=pattern, count=SCAN_BATCH)),
            )
        )
        if not full_keys:
            record_scan_duration(BACKEND, time.perf_counter() - start)
            return []
        raws = self._call("scan", self._client.mget, full_keys)
        record_scan_duration(BACKEND, time.perf_counter() - start)

        cut = len(self._namespace)
        results = []
        for full_key, raw in zip(full_keys, raws):
            # Deleted between SCAN and MGET
            if raw is None:
                continue
            key = full_key[cut:]
            results.append((key, self._decode(key, raw)))
        return results

    def get_by_prefix(self, prefix: str) -> List[dict[str, Any]]:
        return [value for _, value in self.scan_prefix(prefix)]

    def close(self) -> None:
        try:
            self._client.close()
        except redis.RedisError as e:
            logger.debug("Redis close failed: %s", e)
