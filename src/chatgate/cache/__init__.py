"""缓存适配器：进程内 MemoryCache 与远端 RedisCache"""

from .memory import MemoryCache
from .redis import RedisCache, RedisLike

__all__ = ["MemoryCache", "RedisCache", "RedisLike"]
