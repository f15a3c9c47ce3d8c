"""BaseTask -- 三种内置 Task 的公共部分"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from ..i18n import Translations, get_translation

ButtonFn = Callable[[Any], str]


class BaseTask(ABC):
    """内置 Task 基类

    子类实现 check()，按需覆盖 resolve() 与 _default_label()。
    """

    def __init__(
        self,
        url: str = "",
        button: ButtonFn | None = None,
        always_show: bool = False,
    ) -> None:
        """
        Args:
            url: 目标 URL（可延迟到 resolve() 时确定）
            button: 自定义按钮文字函数，接收请求上下文
            always_show: 已完成时仍在提示键盘中展示
        """
        self.url = url
        self.always_show = always_show
        self._button_fn = button
        self._resolved = bool(url)

    @property
    def resolved(self) -> bool:
        """url 是否已是可访问的具体地址"""
        return self._resolved

    async def resolve(self, api: Any = None) -> None:
        """将目标标识解析为 URL，默认无需解析"""
        self._resolved = True

    @abstractmethod
    async def check(self, ctx: Any, api: Any = None) -> bool:
        """用户是否已完成该任务"""

    def button(self, ctx: Any) -> str:
        if self._button_fn is not None:
            return self._button_fn(ctx)
        user = getattr(ctx, "from_user", None)
        return self._default_label(get_translation(getattr(user, "language_code", None)))

    def _default_label(self, translations: Translations) -> str:
        return translations.button_label_channel

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.url!r}, always_show={self.always_show})"
