"""Protocol 接口定义

使用 Python Protocol 实现结构化子类型（duck typing），
宿主框架的上下文与 Bot API 只需满足这些最小接口。
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from .models import CheckResult, InlineKeyboard


class BotApi(Protocol):
    """特权查询接口（由宿主 Bot 框架提供）"""

    async def get_chat(self, chat_id: int | str) -> Any:
        """查询会话信息，返回对象至少含 title / username / invite_link"""
        ...

    async def get_chat_member(self, chat_id: int | str, user_id: int) -> Any:
        """查询成员信息，返回对象至少含 status"""
        ...

    async def send_chat_action(self, chat_id: int, action: str) -> Any:
        """发送会话动作（如 typing）"""
        ...


class GateContext(Protocol):
    """请求上下文 -- gate 读取的最小字段集

    中间件会在其上挂载 verification 与 verify_tasks。
    """

    from_user: Any
    chat: Any
    api: BotApi | None

    async def reply(
        self,
        text: str,
        *,
        parse_mode: str | None = None,
        reply_markup: InlineKeyboard | None = None,
    ) -> Any:
        """向当前会话发送消息"""
        ...


class Task(Protocol):
    """单个可独立检查的条件"""

    url: str
    always_show: bool

    async def check(self, ctx: GateContext, api: BotApi | None) -> bool:
        """检查任务是否完成，多次调用不改变任务自身状态"""
        ...

    def button(self, ctx: GateContext) -> str:
        """提示键盘中的按钮文字"""
        ...


class Checker(Protocol):
    """验证策略"""

    async def check(self, ctx: GateContext) -> CheckResult:
        """执行验证，返回 CheckResult"""
        ...


class CacheAdapter(Protocol):
    """带 TTL 的键值缓存，过期与不存在对调用方等价"""

    async def get(self, key: str) -> str | None:
        """读取缓存值，不存在或已过期返回 None"""
        ...

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """写入缓存值并设置 TTL（秒）"""
        ...


PromptSender = Callable[[GateContext, list[Task]], Awaitable[None]]
