"""RedisCache -- 远端键值存储适配器

直通客户端原生的 get / setex，传输异常原样抛出，重试策略属于客户端自身。
"""

from typing import Any, Protocol


class RedisLike(Protocol):
    """最小 Redis 客户端接口（redis.asyncio.Redis 满足此接口）"""

    async def get(self, key: str) -> Any:
        ...


class RedisCache:
    """Redis 缓存适配器

    兼容 redis-py 风格的 setex 与 node 风格的 setEx。
    """

    def __init__(self, client: RedisLike) -> None:
        setter = getattr(client, "setex", None) or getattr(client, "setEx", None)
        if not callable(setter):
            raise TypeError("Redis client must expose setex or setEx")
        self._client = client
        self._setex = setter

    async def get(self, key: str) -> str | None:
        value = await self._client.get(key)
        if isinstance(value, bytes):
            # 未开启 decode_responses 的客户端返回 bytes
            return value.decode("utf-8")
        return value

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        await self._setex(key, ttl_seconds, value)
