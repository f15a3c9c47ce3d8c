"""端到端场景 -- 中间件 + 真实 Checker / Task / 缓存组合

场景：
1. 匿名请求直接通过
2. 无 url 且无 api 的频道任务无法添加
3. 外部服务 HTTP 500：放行、记录错误、不缓存
4. 托管提示模式下需要用户操作：拦截、无本地任务、不发本地提示
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from chatgate import (
    BotTask,
    ChannelTask,
    CustomTask,
    FlyerChecker,
    MemoryCache,
    ResolutionError,
    SubGramChecker,
    TaskChecker,
    create_verifier,
)


def _subgram(response: httpx.Response, **kwargs) -> SubGramChecker:
    return SubGramChecker(
        key="secret",
        verify_on_init=False,
        transport=httpx.MockTransport(lambda request: response),
        **kwargs,
    )


class TestScenarios:
    async def test_anonymous_request(self, make_ctx):
        """场景 1：匿名请求通过，Checker 与缓存均未触碰"""
        checker = AsyncMock()
        cache = AsyncMock()
        verifier = await create_verifier(checker, cache=cache)
        ctx = make_ctx(anonymous=True)
        await verifier(ctx, AsyncMock())

        assert await ctx.verify_tasks() is True
        checker.check.assert_not_called()
        cache.get.assert_not_called()

    async def test_unresolvable_channel_task(self):
        """场景 2：无 url 且无 api 的频道任务使 gate 构建失败"""
        checker = TaskChecker(tasks=[ChannelTask(chat_id=-1001234)])

        with pytest.raises(ResolutionError):
            await checker.init()

    async def test_upstream_http_500(self, make_ctx):
        """场景 3：HTTP 500 放行，verification.meta.error 有值，不写缓存"""
        cache = MemoryCache()
        verifier = await create_verifier(
            _subgram(httpx.Response(500, json={"status": "error", "code": 500, "message": "oops"})),
            cache=cache,
        )
        ctx = make_ctx()
        await verifier(ctx, AsyncMock())

        assert await ctx.verify_tasks() is True
        assert ctx.verification.meta["error"] == "oops"
        assert await cache.get("c-verif:1") is None

    async def test_flyer_http_500_json_body(self, make_ctx):
        """场景 3（Flyer）：HTTP 500 的 JSON 响应同样放行且不写缓存"""
        cache = MemoryCache()
        checker = FlyerChecker(
            key="k",
            verify_on_init=False,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(500, json={"detail": "Internal error"})
            ),
        )
        verifier = await create_verifier(checker, cache=cache)
        ctx = make_ctx()
        await verifier(ctx, AsyncMock())

        assert await ctx.verify_tasks() is True
        assert ctx.verification.meta["error"] == "http_500"
        assert await cache.get("c-verif:1") is None

    async def test_hosted_prompt_needs_action(self, make_ctx):
        """场景 4：托管提示模式，2 个待办赞助商 -> 拦截，无本地任务与提示"""
        send_prompt = AsyncMock()
        sponsors = [
            {"link": f"https://t.me/sponsor{i}", "available_now": True, "status": "unsubscribed"}
            for i in range(2)
        ]
        verifier = await create_verifier(
            _subgram(
                httpx.Response(
                    200, json={"status": "warning", "code": 200, "result": {"sponsors": sponsors}}
                ),
                get_links_mode=False,
                send_prompt=send_prompt,
            )
        )
        ctx = make_ctx()
        await verifier(ctx, AsyncMock())

        assert await ctx.verify_tasks() is False
        assert ctx.verification.tasks is None
        send_prompt.assert_not_called()
        ctx.reply.assert_not_called()


class TestMixedTasks:
    """异构任务组合"""

    async def test_channel_bot_custom_combination(self, make_ctx, bot_api):
        """频道已加入、Bot 未启动、自定义条件完成 -> 只有 Bot 任务阻塞"""
        companion_api = AsyncMock()
        companion_api.send_chat_action.side_effect = RuntimeError("Forbidden")
        channel = ChannelTask(chat_id="@news_channel")
        bot = BotTask(username="helper_bot", api=companion_api)
        custom = CustomTask(
            url="https://example.com/rules",
            check=AsyncMock(return_value=True),
            always_show=True,
        )
        send_prompt = AsyncMock()
        cache = MemoryCache()
        verifier = await create_verifier(
            TaskChecker(tasks=[channel, bot, custom], api=bot_api, send_prompt=send_prompt),
            cache=cache,
        )
        ctx = make_ctx(api=bot_api)
        await verifier(ctx, AsyncMock())

        assert await ctx.verify_tasks() is False
        assert ctx.verification.tasks == [bot]
        send_prompt.assert_awaited_once_with(ctx, [bot, custom])
        assert await cache.get("c-verif:1") is None

    async def test_completed_tasks_are_cached(self, make_ctx, bot_api):
        """全部完成后写缓存，下一个请求不再查询成员状态"""
        verifier = await create_verifier(
            TaskChecker(tasks=[ChannelTask(chat_id=-1001, url="https://t.me/news")]),
            cache=MemoryCache(),
        )

        for _ in range(2):
            ctx = make_ctx(api=bot_api)
            await verifier(ctx, AsyncMock())
            assert await ctx.verify_tasks() is True

        bot_api.get_chat_member.assert_awaited_once()

    async def test_broken_task_fails_open(self, make_ctx, bot_api):
        """任务异常导致整批失败，由编排器按 fail-open 放行"""
        bot_api.get_chat_member.side_effect = RuntimeError("chat not found")
        on_error = MagicMock()
        verifier = await create_verifier(
            TaskChecker(tasks=[ChannelTask(chat_id=-1001, url="https://t.me/news")]),
            cache=MemoryCache(),
            on_error=on_error,
        )
        ctx = make_ctx(api=bot_api)
        await verifier(ctx, AsyncMock())

        assert await ctx.verify_tasks() is True
        on_error.assert_called_once()

    async def test_left_member_then_joins(self, make_ctx, bot_api):
        """用户先未加入被拦截，加入后通过"""
        bot_api.get_chat_member.return_value = SimpleNamespace(status="left")
        verifier = await create_verifier(
            TaskChecker(
                tasks=[ChannelTask(chat_id=-1001, url="https://t.me/news")],
                send_prompt=AsyncMock(),
            ),
            cache=MemoryCache(),
        )

        ctx = make_ctx(api=bot_api)
        await verifier(ctx, AsyncMock())
        assert await ctx.verify_tasks() is False

        bot_api.get_chat_member.return_value = SimpleNamespace(status="member")
        ctx = make_ctx(api=bot_api)
        await verifier(ctx, AsyncMock())
        assert await ctx.verify_tasks() is True
