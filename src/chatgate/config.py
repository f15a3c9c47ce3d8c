"""GateConfig -- gate 配置加载

从环境变量加载默认策略（TTL、fail-open、超时、外部服务密钥）。
create_verifier() 的显式参数优先于此处的配置。
"""

import os
from collections.abc import Callable

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

DEFAULT_CACHE_TTL_SECONDS = 3600
DEFAULT_CACHE_KEY_PREFIX = "c-verif:"
DEFAULT_MEMORY_CACHE_MAX = 5000
DEFAULT_HTTP_TIMEOUT_S = 15.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class GateConfig(BaseModel):
    """gate 配置 -- 从环境变量加载

    环境变量:
        CHATGATE_CACHE_TTL_S: 验证结果缓存时长（秒，默认 3600）
        CHATGATE_CACHE_KEY_PREFIX: 缓存键前缀（默认 "c-verif:"）
        CHATGATE_FAIL_OPEN: 异常时是否放行（默认 true）
        CHATGATE_MEMORY_CACHE_MAX: 进程内缓存最大条目数（默认 5000）
        CHATGATE_HTTP_TIMEOUT_S: 外部服务请求超时（秒，默认 15）
        FLYER_API_KEY / SUBGRAM_API_KEY: 外部服务密钥
    """

    cache_ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        ge=1,
        description="验证通过结果的缓存时长（秒）",
    )
    cache_key_prefix: str = Field(
        default=DEFAULT_CACHE_KEY_PREFIX,
        description="默认缓存键命名空间",
    )
    fail_open: bool = Field(
        default=True,
        description="验证异常时放行（True）或拦截（False）",
    )
    memory_cache_max: int = Field(
        default=DEFAULT_MEMORY_CACHE_MAX,
        ge=1,
        description="MemoryCache 最大条目数",
    )
    http_timeout_s: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_S,
        gt=0,
        description="外部服务请求超时（秒）",
    )
    flyer_api_key: SecretStr = Field(default=SecretStr(""), description="Flyer 服务密钥")
    subgram_api_key: SecretStr = Field(default=SecretStr(""), description="SubGram 服务密钥")


def _parse_number(
    env_var: str,
    value: str,
    cast: Callable[[str], int | float],
    fallback: int | float,
) -> int | float | None:
    try:
        return cast(value)
    except ValueError:
        log.warning(
            "invalid_numeric_config",
            env_var=env_var,
            value=value,
            fallback=fallback,
        )
        return None


def load_gate_config() -> GateConfig:
    """从环境变量加载 gate 配置

    非法数值记录 warning 并保留默认值，不阻塞启动。

    Returns:
        GateConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("CHATGATE_CACHE_TTL_S"):
        parsed = _parse_number("CHATGATE_CACHE_TTL_S", val, int, DEFAULT_CACHE_TTL_SECONDS)
        if parsed is not None:
            kwargs["cache_ttl_seconds"] = parsed

    if val := os.environ.get("CHATGATE_CACHE_KEY_PREFIX"):
        kwargs["cache_key_prefix"] = val

    if val := os.environ.get("CHATGATE_FAIL_OPEN"):
        lowered = val.strip().lower()
        if lowered in _TRUE_VALUES:
            kwargs["fail_open"] = True
        elif lowered in _FALSE_VALUES:
            kwargs["fail_open"] = False
        else:
            log.warning(
                "invalid_bool_config",
                env_var="CHATGATE_FAIL_OPEN",
                value=val,
                fallback=True,
            )

    if val := os.environ.get("CHATGATE_MEMORY_CACHE_MAX"):
        parsed = _parse_number("CHATGATE_MEMORY_CACHE_MAX", val, int, DEFAULT_MEMORY_CACHE_MAX)
        if parsed is not None:
            kwargs["memory_cache_max"] = parsed

    if val := os.environ.get("CHATGATE_HTTP_TIMEOUT_S"):
        parsed = _parse_number("CHATGATE_HTTP_TIMEOUT_S", val, float, DEFAULT_HTTP_TIMEOUT_S)
        if parsed is not None:
            kwargs["http_timeout_s"] = parsed

    if val := os.environ.get("FLYER_API_KEY"):
        kwargs["flyer_api_key"] = SecretStr(val)

    if val := os.environ.get("SUBGRAM_API_KEY"):
        kwargs["subgram_api_key"] = SecretStr(val)

    return GateConfig(**kwargs)
