"""CustomTask -- 完全由调用方决定完成条件与按钮文字"""

from collections.abc import Awaitable, Callable
from typing import Any

from .base import BaseTask, ButtonFn

CheckFn = Callable[[Any], Awaitable[bool]]


class CustomTask(BaseTask):
    """自定义谓词任务

    适用于内置形态之外的条件，例如轮询第三方 API 的异步状态。
    """

    def __init__(
        self,
        url: str,
        check: CheckFn,
        button: ButtonFn | None = None,
        always_show: bool = False,
    ) -> None:
        super().__init__(url=url, button=button, always_show=always_show)
        self._check_fn = check

    async def check(self, ctx: Any, api: Any = None) -> bool:
        return await self._check_fn(ctx)
