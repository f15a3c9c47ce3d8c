"""ChannelTask -- 频道/群组成员资格检查"""

from typing import Any

import structlog

from ..enums import MemberStatus
from ..exceptions import ResolutionError
from .base import BaseTask, ButtonFn

log = structlog.get_logger()

PUBLIC_URL_TEMPLATE = "https://t.me/{username}"


class ChannelTask(BaseTask):
    """用户必须是目标频道的成员

    任何非 left 的成员状态都视为已完成。
    """

    def __init__(
        self,
        chat_id: int | str,
        url: str | None = None,
        button: ButtonFn | None = None,
        always_show: bool = False,
    ) -> None:
        """
        Args:
            chat_id: 频道 id 或 @username
            url: 显式指定的加入链接，提供时跳过查询
            button: 自定义按钮文字函数
            always_show: 已完成时仍展示
        """
        super().__init__(url=url or "", button=button, always_show=always_show)
        self.chat_id = chat_id

    async def resolve(self, api: Any = None) -> None:
        """解析加入链接

        优先级：显式 url > invite_link > 公开 username。
        已解析时直接返回（幂等）。

        Raises:
            ResolutionError: 无 url 且无 api、会话不是频道、或无任何可用链接
        """
        if self._resolved:
            return

        if api is None:
            if not self.url:
                raise ResolutionError(self.chat_id, "需要显式 url 或可用的 api 实例")
            self._resolved = True
            return

        chat = await api.get_chat(self.chat_id)
        if not getattr(chat, "title", None):
            raise ResolutionError(self.chat_id, "目标会话不是频道或群组")

        resolved_url = self.url or getattr(chat, "invite_link", None)
        if not resolved_url:
            username = getattr(chat, "username", None)
            if username:
                resolved_url = PUBLIC_URL_TEMPLATE.format(username=username)

        if not resolved_url:
            raise ResolutionError(self.chat_id, "会话既无邀请链接也无公开 username")

        self.url = resolved_url
        self._resolved = True
        log.debug("channel_task_resolved", chat_id=self.chat_id, url=resolved_url)

    async def check(self, ctx: Any, api: Any = None) -> bool:
        user = getattr(ctx, "from_user", None)
        if user is None:
            return True
        if api is None:
            # 无特权查询能力：乐观放行，按钮仍会展示
            log.warning("channel_task_check_skipped", chat_id=self.chat_id, reason="no_api")
            return True
        member = await api.get_chat_member(self.chat_id, user.id)
        return member.status != MemberStatus.LEFT
