"""BotTask -- 用户是否已启动配套 Bot"""

from typing import Any

import structlog

from ..i18n import Translations
from .base import BaseTask, ButtonFn
from .channel import PUBLIC_URL_TEMPLATE

log = structlog.get_logger()

PROBE_ACTION = "typing"


class BotTask(BaseTask):
    """用户必须曾与配套 Bot 建立对话

    通过配套 Bot 自己的 api 向用户发送 typing 动作来探测：
    成功说明用户启动过该 Bot，失败说明没有。
    未配置 api 时跳过检查（始终视为完成），按钮仍会展示。
    """

    def __init__(
        self,
        username: str,
        url: str | None = None,
        api: Any = None,
        button: ButtonFn | None = None,
        always_show: bool = False,
    ) -> None:
        super().__init__(
            url=url or PUBLIC_URL_TEMPLATE.format(username=username),
            button=button,
            always_show=always_show,
        )
        self.username = username
        self._api = api

    async def check(self, ctx: Any, api: Any = None) -> bool:
        # 传入的 api 属于宿主 Bot，探测必须使用配套 Bot 自己的 api
        if self._api is None:
            return True

        user = getattr(ctx, "from_user", None)
        if user is None:
            return True

        try:
            await self._api.send_chat_action(user.id, PROBE_ACTION)
        except Exception as e:
            log.debug(
                "bot_task_probe_rejected",
                username=self.username,
                user_id=user.id,
                error=str(e),
            )
            return False
        return True

    def _default_label(self, translations: Translations) -> str:
        return translations.button_label_bot
