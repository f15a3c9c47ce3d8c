"""MemoryCache -- 进程内 LRU + TTL 缓存

条目数超过 max_size 时按最近最少使用淘汰，不考虑剩余 TTL。
依赖 asyncio 单线程执行保证并发请求间的读写安全。
"""

import time
from collections.abc import Callable
from typing import NamedTuple

from cachetools import TLRUCache

from ..config import DEFAULT_CACHE_TTL_SECONDS, DEFAULT_MEMORY_CACHE_MAX, GateConfig


class _Entry(NamedTuple):
    value: str
    ttl_seconds: float


def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl_seconds


class MemoryCache:
    """进程内缓存适配器"""

    def __init__(
        self,
        max_size: int = DEFAULT_MEMORY_CACHE_MAX,
        default_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            max_size: 最大条目数
            default_ttl_seconds: setex 传入非正 TTL 时使用的默认值
            timer: 时钟函数（测试可注入）
        """
        self._default_ttl_seconds = default_ttl_seconds
        self._cache: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=max_size,
            ttu=_time_to_use,
            timer=timer,
        )

    @classmethod
    def from_config(cls, config: GateConfig) -> "MemoryCache":
        return cls(
            max_size=config.memory_cache_max,
            default_ttl_seconds=config.cache_ttl_seconds,
        )

    async def get(self, key: str) -> str | None:
        entry = self._cache.get(key)
        return entry.value if entry is not None else None

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        ttl = ttl_seconds if ttl_seconds > 0 else self._default_ttl_seconds
        self._cache[key] = _Entry(value, ttl)

    def __len__(self) -> int:
        return len(self._cache)
