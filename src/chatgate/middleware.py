"""VerificationMiddleware -- 验证编排器

把 Checker、缓存与策略（TTL、缓存键、fail-open/closed、on_error）组合成中间件：
为每个请求上下文挂载 verify_tasks() 与 verification，然后交给下游处理。
中间件本身从不终止处理链，是否拦截由调用方根据 verify_tasks() 的结果决定。

两层缓存：
- 请求内：ctx.verification 记忆本次请求的通过结果，避免重复检查
- 跨请求：CacheAdapter 只保存"已验证"哨兵值，失败结果从不缓存
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from .config import GateConfig
from .exceptions import CheckerInitError, GateError, VerificationError
from .models import CheckResult
from .protocols import CacheAdapter, Checker

log = structlog.get_logger()

VERIFIED_SENTINEL = "1"
FAIL_CLOSED_ERROR = "verification_failed"

CacheKeyFn = Callable[[Any], str | None]
ErrorHook = Callable[[GateError, Any], None]
VerifiedHook = Callable[[Any], Awaitable[None] | None]
CallNext = Callable[[Any], Awaitable[Any]]


def make_cache_key(prefix: str) -> CacheKeyFn:
    """生成默认缓存键函数：<prefix><user id>，匿名请求返回 None"""

    def cache_key(ctx: Any) -> str | None:
        user = getattr(ctx, "from_user", None)
        return f"{prefix}{user.id}" if user is not None else None

    return cache_key


class VerificationMiddleware:
    """验证中间件

    通过 create_verifier() 构建，构建时已完成 Checker 初始化。
    """

    def __init__(
        self,
        checker: Checker,
        cache: CacheAdapter | None,
        cache_ttl_seconds: int,
        cache_key: CacheKeyFn,
        on_error: ErrorHook | None,
        fail_open: bool,
    ) -> None:
        self._checker = checker
        self._cache = cache
        self._cache_ttl_seconds = cache_ttl_seconds
        self._cache_key = cache_key
        self._on_error = on_error
        self._fail_open = fail_open

    async def __call__(self, ctx: Any, call_next: CallNext) -> Any:
        """挂载 verify_tasks / verification 后调用下游"""
        ctx.verification = None

        async def verify_tasks(on_verified: VerifiedHook | None = None) -> bool:
            return await self.verify(ctx, on_verified)

        ctx.verify_tasks = verify_tasks
        return await call_next(ctx)

    async def verify(self, ctx: Any, on_verified: VerifiedHook | None = None) -> bool:
        """执行一次请求内幂等的验证，永不抛出异常

        Returns:
            True 放行，False 拦截
        """
        current: CheckResult | None = getattr(ctx, "verification", None)
        if current is not None and current.ok:
            return True

        user = getattr(ctx, "from_user", None)
        if user is None:
            return True

        try:
            key = self._cache_key(ctx)
            result = await self._check_with_cache(ctx, key)
            ctx.verification = result

            if not result.ok:
                log.info("verification_blocked", user_id=user.id, meta_keys=sorted(result.meta))
                return False

            if on_verified is not None:
                outcome = on_verified(ctx)
                if outcome is not None:
                    await outcome
            return True
        except Exception as e:
            return self._resolve_failure(ctx, e)

    async def _check_with_cache(self, ctx: Any, key: str | None) -> CheckResult:
        use_cache = self._cache is not None and key is not None

        if use_cache:
            cached = await self._cache.get(key)
            if cached == VERIFIED_SENTINEL:
                log.debug("verification_cache_hit", cache_key=key)
                return CheckResult(ok=True)

        result = await self._checker.check(ctx)

        if use_cache and result.ok and result.cacheable:
            await self._store_verified(key)

        return result

    async def _store_verified(self, key: str) -> None:
        # 结论已确定，写缓存失败不影响返回值
        try:
            await self._cache.setex(key, self._cache_ttl_seconds, VERIFIED_SENTINEL)
        except Exception as e:
            log.warning(
                "verification_cache_write_failed",
                cache_key=key,
                error=str(e),
                error_type=type(e).__name__,
            )

    def _resolve_failure(self, ctx: Any, error: Exception) -> bool:
        wrapped = error if isinstance(error, GateError) else VerificationError(error)
        if wrapped is not error:
            wrapped.__cause__ = error

        log.error(
            "verification_error",
            error=str(error),
            error_type=type(error).__name__,
            fail_open=self._fail_open,
        )

        if self._on_error is not None:
            try:
                self._on_error(wrapped, ctx)
            except Exception as hook_error:
                log.error("verification_error_hook_failed", error=str(hook_error))

        if self._fail_open:
            ctx.verification = CheckResult(ok=True, cacheable=False)
            return True

        ctx.verification = CheckResult(ok=False, meta={"error": FAIL_CLOSED_ERROR})
        return False


async def create_verifier(
    checker: Checker,
    *,
    cache: CacheAdapter | None = None,
    cache_ttl_seconds: int | None = None,
    cache_key: CacheKeyFn | None = None,
    on_error: ErrorHook | None = None,
    fail_open: bool | None = None,
    config: GateConfig | None = None,
) -> VerificationMiddleware:
    """构建验证中间件

    未显式传入的策略参数取自 config（默认 GateConfig()）。

    Args:
        checker: 验证策略
        cache: 跨请求缓存，None 表示不缓存
        cache_ttl_seconds: 通过结果的缓存时长（秒）
        cache_key: 缓存键函数，返回 None 时跳过缓存
        on_error: 异常观测钩子，只用于观测，不影响结论
        fail_open: 异常时放行（True）或拦截（False）
        config: 默认策略来源

    Returns:
        VerificationMiddleware

    Raises:
        CheckerInitError: checker.init() 失败
    """
    config = config or GateConfig()

    init = getattr(checker, "init", None)
    if init is not None:
        try:
            await init()
        except CheckerInitError:
            raise
        except Exception as e:
            raise CheckerInitError(type(checker).__name__, str(e)) from e

    effective_fail_open = fail_open if fail_open is not None else config.fail_open
    middleware = VerificationMiddleware(
        checker=checker,
        cache=cache,
        cache_ttl_seconds=cache_ttl_seconds if cache_ttl_seconds is not None else config.cache_ttl_seconds,
        cache_key=cache_key or make_cache_key(config.cache_key_prefix),
        on_error=on_error,
        fail_open=effective_fail_open,
    )
    log.info(
        "verifier_created",
        checker=type(checker).__name__,
        cache=type(cache).__name__ if cache is not None else None,
        fail_open=effective_fail_open,
    )
    return middleware
