"""默认提示 -- 本地化文案 + URL 按钮键盘

调用方传入 send_prompt 时不会走到这里。
"""

from collections.abc import Sequence
from typing import Any

import structlog

from .i18n import get_translation
from .models import InlineKeyboard

log = structlog.get_logger()

DEFAULT_BUTTON_LABEL = "Task"


def generate_keyboard(tasks: Sequence[Any], ctx: Any) -> InlineKeyboard:
    """为每个任务生成一行 URL 按钮

    Args:
        tasks: 需要展示的任务
        ctx: 请求上下文，用于语言与按钮文字

    Returns:
        InlineKeyboard
    """
    keyboard = InlineKeyboard()
    for task in tasks:
        button = getattr(task, "button", None)
        label = button(ctx) if callable(button) else DEFAULT_BUTTON_LABEL
        keyboard.url(label, task.url)
    return keyboard


async def send_default_prompt(ctx: Any, tasks: Sequence[Any], pending_count: int) -> None:
    """发送默认提示消息

    Args:
        ctx: 请求上下文
        tasks: 键盘中展示的任务（未完成 + always_show）
        pending_count: 未完成任务数，决定文案单复数
    """
    user = getattr(ctx, "from_user", None)
    translations = get_translation(getattr(user, "language_code", None))
    keyboard = generate_keyboard(tasks, ctx)

    await ctx.reply(
        translations.prompt_text(pending_count),
        parse_mode="HTML",
        reply_markup=keyboard,
    )
    log.debug(
        "verification_prompt_sent",
        user_id=getattr(user, "id", None),
        task_count=len(tasks),
        pending_count=pending_count,
    )
