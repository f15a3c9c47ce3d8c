"""SubGramChecker -- SubGram 赞助商服务

两种工作模式：
- 托管模式（turnkey）：SubGram 持有 Bot token，自行向用户推送提示，本 Checker 不返回任务
- 链接模式（get links）：SubGram 只返回赞助商链接，由本 Checker 构造任务并发送提示
"""

from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from ..config import DEFAULT_HTTP_TIMEOUT_S
from ..enums import ServiceStatus, SponsorAction, SponsorStatus
from ..exceptions import CheckerInitError, TransportError
from ..models import CheckResult
from ..prompt import send_default_prompt
from ..protocols import PromptSender
from ..tasks.custom import CustomTask
from ._http import ServiceClient

log = structlog.get_logger()

SUBGRAM_BASE_URL = "https://api.subgram.org"
DEFAULT_SPONSOR_BUTTON = "Subscribe"
UNAUTHORIZED_CODE = 401
# 明确拒绝凭据的 HTTP 状态码
AUTH_REJECTED_CODES = frozenset({401, 403})

# 透传给 SubGram 的可选用户字段
_USER_FIELDS = ("first_name", "username", "language_code", "is_premium")


async def _sponsor_pending(_ctx: Any) -> bool:
    # 本地无法核实赞助商订阅；重新调用 verify_tasks() 时由 SubGram 复查
    return False


class SubGramChecker:
    """SubGram 服务 Checker

    响应解释：
    - status=error 或 code!=200: fail-open，放行且不缓存
    - status=warning: 需要用户订阅赞助商
    - 其他: 通过
    - 传输层异常: fail-closed，拦截但不提示
    """

    def __init__(
        self,
        key: str,
        timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
        verify_on_init: bool = True,
        exclude_resource_ids: Sequence[int] | None = None,
        exclude_ads_ids: Sequence[int] | None = None,
        max_sponsors: int | None = None,
        get_links_mode: bool | None = None,
        send_prompt: PromptSender | None = None,
        action: SponsorAction | str | None = None,
        base_url: str = SUBGRAM_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            key: SubGram API key（通过 Auth 请求头发送）
            timeout_s: 请求超时（秒）
            verify_on_init: init() 时是否校验 key
            exclude_resource_ids: 排除的资源 id
            exclude_ads_ids: 排除的广告 id
            max_sponsors: 单次最多返回的赞助商数量
            get_links_mode: True 链接模式 / False 托管模式 / None 按响应自动判断
            send_prompt: 链接模式下的自定义提示回调，None 时使用默认提示
            action: 赞助商列表管理方式
            base_url: 服务地址
            transport: 自定义 httpx transport（测试用）
        """
        self._verify_on_init = verify_on_init
        self._exclude_resource_ids = list(exclude_resource_ids or [])
        self._exclude_ads_ids = list(exclude_ads_ids or [])
        self._max_sponsors = max_sponsors
        self._get_links_mode = get_links_mode
        self._send_prompt = send_prompt
        self._action = SponsorAction(action) if action is not None else None
        self._client = ServiceClient(
            base_url,
            timeout_s,
            headers={"Auth": key},
            transport=transport,
        )

    async def init(self) -> None:
        """通过 /get-balance 校验 key

        网络异常与服务暂不可用（非 2xx）只记录日志，留到运行期处理；
        只有服务明确拒绝 key 时才失败。

        Raises:
            CheckerInitError: key 无效
        """
        if not self._verify_on_init:
            return

        try:
            reply = await self._client.post_json("/get-balance")
        except TransportError as e:
            log.warning("checker_init_probe_skipped", checker="SubGramChecker", error=str(e))
            return

        data = reply.data
        if reply.status_code in AUTH_REJECTED_CODES or data.get("code") == UNAUTHORIZED_CODE:
            raise CheckerInitError("SubGramChecker", "key 校验失败: 无效的 API key")

        if not reply.is_success:
            # 服务暂不可用，与网络异常同样处理
            log.warning(
                "checker_init_probe_skipped",
                checker="SubGramChecker",
                status_code=reply.status_code,
            )
            return

        if data.get("status") == ServiceStatus.ERROR:
            reason = data.get("message") or data.get("error") or "Unknown error"
            raise CheckerInitError("SubGramChecker", f"key 校验失败: {reason}")

        log.info("checker_initialized", checker="SubGramChecker")

    def _build_payload(self, ctx: Any) -> dict[str, Any]:
        user = ctx.from_user
        payload: dict[str, Any] = {"chat_id": ctx.chat.id, "user_id": user.id}
        for field in _USER_FIELDS:
            value = getattr(user, field, None)
            if value is not None and value != "":
                payload[field] = value

        if self._exclude_resource_ids:
            payload["exclude_resource_ids"] = self._exclude_resource_ids
        if self._exclude_ads_ids:
            payload["exclude_ads_ids"] = self._exclude_ads_ids
        if self._max_sponsors is not None:
            payload["max_sponsors"] = self._max_sponsors
        if self._action is not None:
            payload["action"] = str(self._action)
        return payload

    def _is_links_mode(self, data: dict[str, Any]) -> bool:
        if self._get_links_mode is not None:
            return self._get_links_mode
        # 响应带 additional.sponsors 说明 SubGram 处于链接模式
        additional = data.get("additional") or {}
        return "sponsors" in additional

    @staticmethod
    def create_tasks_from_sponsors(sponsors: Sequence[dict[str, Any]]) -> list[CustomTask]:
        """为需要订阅的赞助商构造任务

        只保留有链接、当前可用且未订阅的赞助商。
        """
        tasks: list[CustomTask] = []
        for sponsor in sponsors:
            link = sponsor.get("link")
            if not link or not sponsor.get("available_now"):
                continue
            if sponsor.get("status") != SponsorStatus.UNSUBSCRIBED:
                continue
            label = sponsor.get("button_text") or DEFAULT_SPONSOR_BUTTON
            tasks.append(
                CustomTask(
                    url=link,
                    check=_sponsor_pending,
                    button=lambda _ctx, label=label: label,
                )
            )
        return tasks

    async def check(self, ctx: Any) -> CheckResult:
        user = getattr(ctx, "from_user", None)
        if user is None or getattr(ctx, "chat", None) is None:
            return CheckResult(ok=True)

        try:
            reply = await self._client.post_json("/get-sponsors", self._build_payload(ctx))
        except TransportError as e:
            # 服务不可达时拦截；与下方 error 状态放行的策略不对称，是有意为之
            log.warning("checker_transport_failed", checker="SubGramChecker", user_id=user.id)
            return CheckResult(
                ok=False,
                meta={"error": "subgram_request_failed", "details": str(e.original_error)},
            )

        data = reply.data
        status = data.get("status")

        if not reply.is_success or status == ServiceStatus.ERROR or data.get("code") != 200:
            error = data.get("error") or data.get("message") or "subgram_request_failed"
            log.warning(
                "checker_upstream_error_fail_open",
                checker="SubGramChecker",
                user_id=user.id,
                status_code=reply.status_code,
                code=data.get("code"),
                error=error,
            )
            return CheckResult(
                ok=True,
                meta={"subgram": data, "error": error},
                cacheable=False,
            )

        if status == ServiceStatus.WARNING:
            if not self._is_links_mode(data):
                # 托管模式：SubGram 已自行推送提示
                return CheckResult(ok=False, meta={"subgram": data})

            additional = data.get("additional") or {}
            result = data.get("result") or {}
            sponsors = additional.get("sponsors") or result.get("sponsors") or []
            tasks = self.create_tasks_from_sponsors(sponsors)

            if tasks:
                if self._send_prompt is not None:
                    await self._send_prompt(ctx, tasks)
                else:
                    await send_default_prompt(ctx, tasks, pending_count=len(tasks))

            log.info("sponsor_check_blocked", user_id=user.id, sponsor_count=len(tasks))
            return CheckResult(
                ok=False,
                tasks=tasks or None,
                meta={"subgram": data},
            )

        return CheckResult(ok=True, meta={"subgram": data})
