"""FlyerChecker -- Flyer 赞助商服务

Flyer 自行向用户发送提示（hosted prompt），本 Checker 只返回通过与否，不返回任务。
"""

from typing import Any

import httpx
import structlog

from ..config import DEFAULT_HTTP_TIMEOUT_S
from ..exceptions import CheckerInitError, TransportError
from ..models import CheckResult
from ._http import ServiceClient

log = structlog.get_logger()

FLYER_BASE_URL = "https://api.flyerservice.io"
# 明确拒绝凭据的 HTTP 状态码
AUTH_REJECTED_CODES = frozenset({401, 403})


class FlyerChecker:
    """Flyer 服务 Checker

    响应解释：
    - skip=true: 通过
    - 响应含 error 或非 2xx 状态码: fail-open，放行且不缓存
    - 其他: 需要用户操作，Flyer 已自行推送提示
    - 传输层异常: fail-closed，拦截但不提示
    """

    def __init__(
        self,
        key: str,
        timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
        verify_on_init: bool = True,
        message: dict[str, Any] | None = None,
        base_url: str = FLYER_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            key: Flyer API key（随请求体发送）
            timeout_s: 请求超时（秒）
            verify_on_init: init() 时是否校验 key
            message: 透传给 Flyer 的提示消息定制（rows/text/button_* 等）
            base_url: 服务地址
            transport: 自定义 httpx transport（测试用）
        """
        self._key = key
        self._verify_on_init = verify_on_init
        self._message = message
        self._client = ServiceClient(base_url, timeout_s, transport=transport)

    async def init(self) -> None:
        """校验 key

        网络异常与服务暂不可用（非 2xx）只记录日志，留到运行期处理；
        只有服务明确拒绝 key 时才失败。

        Raises:
            CheckerInitError: key 无效
        """
        if not self._verify_on_init:
            return

        try:
            reply = await self._client.post_json("/get_me", {"key": self._key})
        except TransportError as e:
            log.warning("checker_init_probe_skipped", checker="FlyerChecker", error=str(e))
            return

        data = reply.data
        if reply.status_code in AUTH_REJECTED_CODES:
            raise CheckerInitError("FlyerChecker", f"key 校验失败: HTTP {reply.status_code}")

        if not reply.is_success:
            # 服务暂不可用，与网络异常同样处理
            log.warning(
                "checker_init_probe_skipped",
                checker="FlyerChecker",
                status_code=reply.status_code,
            )
            return

        if data.get("status") is not True and data.get("error"):
            raise CheckerInitError("FlyerChecker", f"key 校验失败: {data['error']}")

        log.info("checker_initialized", checker="FlyerChecker")

    async def check(self, ctx: Any) -> CheckResult:
        user = getattr(ctx, "from_user", None)
        if user is None:
            return CheckResult(ok=True)

        payload: dict[str, Any] = {
            "key": self._key,
            "user_id": user.id,
            "language_code": getattr(user, "language_code", None),
        }
        if self._message:
            payload["message"] = self._message

        try:
            reply = await self._client.post_json("/check", payload)
        except TransportError as e:
            # 服务不可达时拦截；与下方响应含 error 时放行的策略不对称，是有意为之
            log.warning("checker_transport_failed", checker="FlyerChecker", user_id=user.id)
            return CheckResult(
                ok=False,
                meta={"error": "flyer_request_failed", "details": str(e.original_error)},
            )

        data = reply.data
        if reply.is_success and data.get("skip") is True:
            return CheckResult(ok=True, meta={"flyer": data})

        if not reply.is_success or data.get("error"):
            error = data.get("error") or f"http_{reply.status_code}"
            log.warning(
                "checker_upstream_error_fail_open",
                checker="FlyerChecker",
                user_id=user.id,
                status_code=reply.status_code,
                error=error,
            )
            return CheckResult(
                ok=True,
                meta={"flyer": data, "error": error},
                cacheable=False,
            )

        # 无 tasks：Flyer 已自行向用户发送提示
        return CheckResult(ok=False, meta={"flyer": data})
