"""SubGramChecker 单元测试 -- httpx.MockTransport 模拟 SubGram 服务"""

import json
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
from chatgate.checkers import SubGramChecker
from chatgate.enums import SponsorAction
from chatgate.exceptions import CheckerInitError
from chatgate.tasks import CustomTask


def _sponsor(link: str, **overrides: Any) -> dict[str, Any]:
    sponsor = {
        "link": link,
        "available_now": True,
        "status": "unsubscribed",
        "button_text": f"Join {link}",
    }
    sponsor.update(overrides)
    return sponsor


def _checker(response: httpx.Response, seen: list[httpx.Request] | None = None, **kwargs):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return response

    return SubGramChecker(key="secret", transport=httpx.MockTransport(handler), **kwargs)


def _warning(**body: Any) -> httpx.Response:
    return httpx.Response(200, json={"status": "warning", "code": 200, **body})


class TestSubGramInit:
    """init() 通过 /get-balance 校验 key"""

    async def test_valid_key(self):
        checker = _checker(httpx.Response(200, json={"status": "ok", "code": 200, "balance": 1.5}))
        await checker.init()

    async def test_unauthorized_raises(self):
        """401 视为无效 key"""
        checker = _checker(httpx.Response(401, json={"status": "error", "code": 401}))
        with pytest.raises(CheckerInitError):
            await checker.init()

    async def test_error_status_raises(self):
        checker = _checker(
            httpx.Response(200, json={"status": "error", "code": 403, "message": "Bot blocked"})
        )
        with pytest.raises(CheckerInitError) as exc_info:
            await checker.init()
        assert "Bot blocked" in str(exc_info.value)

    async def test_network_error_deferred(self):
        """网络异常不阻塞初始化"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timeout", request=request)

        checker = SubGramChecker(key="secret", transport=httpx.MockTransport(handler))
        await checker.init()

    async def test_service_unavailable_deferred(self):
        """503 文本响应视为服务暂不可用，不阻塞初始化"""
        checker = _checker(httpx.Response(503, text="Service Unavailable"))
        await checker.init()

    async def test_bad_gateway_json_deferred(self):
        """5xx 的 JSON 响应同样不阻塞初始化"""
        checker = _checker(httpx.Response(502, json={"status": "error", "message": "upstream"}))
        await checker.init()


class TestSubGramRequest:
    """请求构造"""

    async def test_payload_and_auth_header(self, make_ctx):
        """Auth 请求头携带 key，请求体带用户字段与策略参数"""
        seen: list[httpx.Request] = []
        checker = _checker(
            httpx.Response(200, json={"status": "ok", "code": 200}),
            seen,
            exclude_resource_ids=[7],
            max_sponsors=3,
            action=SponsorAction.NEWTASK,
        )

        await checker.check(make_ctx())

        request = seen[0]
        assert request.url.path == "/get-sponsors"
        assert request.headers["Auth"] == "secret"
        body = json.loads(request.content)
        assert body == {
            "chat_id": 100,
            "user_id": 1,
            "first_name": "Tester",
            "username": "tester",
            "language_code": "en",
            "exclude_resource_ids": [7],
            "max_sponsors": 3,
            "action": "newtask",
        }

    async def test_missing_chat_passes(self, make_ctx):
        """无会话上下文时直接通过"""
        seen: list[httpx.Request] = []
        checker = _checker(httpx.Response(200, json={}), seen)
        ctx = make_ctx()
        ctx.chat = None

        result = await checker.check(ctx)

        assert result.ok is True
        assert seen == []


class TestSubGramStatus:
    """响应状态解释"""

    async def test_ok_passes(self, make_ctx):
        checker = _checker(httpx.Response(200, json={"status": "ok", "code": 200}))

        result = await checker.check(make_ctx())

        assert result.ok is True
        assert result.cacheable is True

    async def test_error_status_fails_open(self, make_ctx):
        """error 状态放行且不可缓存"""
        checker = _checker(
            httpx.Response(200, json={"status": "error", "code": 500, "message": "internal"})
        )

        result = await checker.check(make_ctx())

        assert result.ok is True
        assert result.cacheable is False
        assert result.meta["error"] == "internal"

    async def test_http_500_text_body_fails_open(self, make_ctx):
        """HTTP 500 非 JSON 响应合成 error 并放行"""
        checker = _checker(httpx.Response(500, text="Bad gateway"))

        result = await checker.check(make_ctx())

        assert result.ok is True
        assert result.meta["error"] == "Bad gateway"
        assert result.meta["subgram"]["code"] == 500

    async def test_transport_failure_fails_closed(self, make_ctx):
        """服务不可达时拦截"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timeout", request=request)

        checker = SubGramChecker(key="secret", transport=httpx.MockTransport(handler))

        result = await checker.check(make_ctx())

        assert result.ok is False
        assert result.tasks is None
        assert result.meta["error"] == "subgram_request_failed"


class TestSubGramWarning:
    """warning 状态：托管模式与链接模式"""

    async def test_hosted_mode_returns_no_tasks(self, make_ctx):
        """托管模式：拦截但不返回任务、不发提示"""
        send_prompt = AsyncMock()
        checker = _checker(
            _warning(result={"sponsors": [_sponsor("https://a"), _sponsor("https://b")]}),
            get_links_mode=False,
            send_prompt=send_prompt,
        )
        ctx = make_ctx()

        result = await checker.check(ctx)

        assert result.ok is False
        assert result.tasks is None
        send_prompt.assert_not_called()
        ctx.reply.assert_not_called()

    async def test_links_mode_auto_detected(self, make_ctx):
        """响应带 additional.sponsors 时自动进入链接模式"""
        send_prompt = AsyncMock()
        checker = _checker(
            _warning(additional={"sponsors": [_sponsor("https://a"), _sponsor("https://b")]}),
            send_prompt=send_prompt,
        )
        ctx = make_ctx()

        result = await checker.check(ctx)

        assert result.ok is False
        assert [task.url for task in result.tasks] == ["https://a", "https://b"]
        send_prompt.assert_awaited_once_with(ctx, result.tasks)

    async def test_only_pending_sponsors_become_tasks(self, make_ctx):
        """只保留有链接、可用、未订阅的赞助商"""
        sponsors = [
            _sponsor("https://pending"),
            _sponsor("https://done", status="subscribed"),
            _sponsor("https://unavailable", available_now=False),
            _sponsor("", button_text="no link"),
        ]
        checker = _checker(_warning(result={"sponsors": sponsors}), get_links_mode=True)

        result = await checker.check(make_ctx())

        assert [task.url for task in result.tasks] == ["https://pending"]

    async def test_sponsor_tasks_never_satisfied_locally(self, make_ctx):
        """赞助商任务本地检查始终未完成，按钮文字取自 button_text"""
        tasks = SubGramChecker.create_tasks_from_sponsors(
            [_sponsor("https://a"), _sponsor("https://b", button_text=None)]
        )
        ctx = make_ctx()

        assert all(isinstance(task, CustomTask) for task in tasks)
        assert [await task.check(ctx) for task in tasks] == [False, False]
        assert tasks[0].button(ctx) == "Join https://a"
        assert tasks[1].button(ctx) == "Subscribe"

    async def test_links_mode_default_prompt(self, make_ctx):
        """未提供 send_prompt 时发送默认提示"""
        checker = _checker(
            _warning(additional={"sponsors": [_sponsor("https://a"), _sponsor("https://b")]})
        )
        ctx = make_ctx()

        await checker.check(ctx)

        ctx.reply.assert_awaited_once()
        assert ctx.reply.call_args.args[0] == "Please complete the tasks to continue."

    async def test_links_mode_without_sponsors_no_prompt(self, make_ctx):
        """链接模式但没有待订阅赞助商：拦截、不提示、tasks 为 None"""
        checker = _checker(_warning(additional={"sponsors": []}))
        ctx = make_ctx()

        result = await checker.check(ctx)

        assert result.ok is False
        assert result.tasks is None
        ctx.reply.assert_not_called()
