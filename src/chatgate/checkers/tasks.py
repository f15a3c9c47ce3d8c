"""TaskChecker -- 多任务聚合验证

所有任务并发检查（fan-out / fan-in），全部完成才通过。
单个任务 check() 抛出的异常不在此处捕获，会使整批检查失败，
由编排器的 fail-open / fail-closed 策略统一处理。
"""

import asyncio
from collections.abc import Sequence
from typing import Any

import structlog

from ..models import CheckResult, InlineKeyboard
from ..prompt import generate_keyboard, send_default_prompt
from ..protocols import PromptSender

log = structlog.get_logger()


class TaskChecker:
    """多任务聚合 Checker

    任务列表可在运行期增删；add_task() 会立即解析任务目标。
    """

    def __init__(
        self,
        tasks: Sequence[Any] = (),
        api: Any = None,
        send_prompt: PromptSender | None = None,
    ) -> None:
        """
        Args:
            tasks: 初始任务，在 init() 时逐个解析并加入
            api: 用于解析任务目标的特权查询接口，None 表示只接受已带 url 的任务
            send_prompt: 自定义提示回调，None 时使用默认提示
        """
        self._inputs = list(tasks)
        self._api = api
        self._send_prompt = send_prompt
        self._tasks: list[Any] = []

    @property
    def tasks(self) -> tuple[Any, ...]:
        """当前任务（只读快照）"""
        return tuple(self._tasks)

    async def add_task(self, task: Any) -> None:
        """解析并追加任务

        Raises:
            ResolutionError: 任务目标无法解析
        """
        resolve = getattr(task, "resolve", None)
        if resolve is not None:
            await resolve(self._api)
        self._tasks.append(task)

    def remove_task(self, url: str) -> bool:
        """按 url 移除第一个匹配的任务，返回是否移除成功"""
        for index, task in enumerate(self._tasks):
            if task.url == url:
                del self._tasks[index]
                return True
        return False

    def clear_tasks(self) -> None:
        self._tasks = []

    async def set_tasks(self, tasks: Sequence[Any]) -> None:
        """整体替换任务列表"""
        self._tasks = []
        for task in tasks:
            await self.add_task(task)

    async def init(self) -> None:
        await self.set_tasks(self._inputs)
        log.info("task_checker_initialized", task_count=len(self._tasks))

    @staticmethod
    def generate_keyboard(tasks: Sequence[Any], ctx: Any) -> InlineKeyboard:
        return generate_keyboard(tasks, ctx)

    async def _check_tasks(self, ctx: Any) -> tuple[list[Any], list[Any]]:
        """并发检查全部任务

        Returns:
            (unmet, to_show) -- to_show 为未完成任务加上已完成的 always_show 任务，
            保持任务原有顺序
        """
        api = getattr(ctx, "api", None) or self._api
        results = await asyncio.gather(*(task.check(ctx, api) for task in self._tasks))

        unmet = [task for task, done in zip(self._tasks, results) if not done]
        to_show = [
            task
            for task, done in zip(self._tasks, results)
            if not done or getattr(task, "always_show", False)
        ]
        return unmet, to_show

    async def check(self, ctx: Any) -> CheckResult:
        if getattr(ctx, "from_user", None) is None:
            return CheckResult(ok=True, tasks=list(self._tasks))

        if not self._tasks:
            return CheckResult(ok=True, tasks=[])

        unmet, to_show = await self._check_tasks(ctx)

        if unmet:
            if self._send_prompt is not None:
                await self._send_prompt(ctx, to_show)
            else:
                await send_default_prompt(ctx, to_show, pending_count=len(unmet))
            log.info(
                "task_check_blocked",
                user_id=ctx.from_user.id,
                unmet_count=len(unmet),
                shown_count=len(to_show),
            )
            # always_show 任务只展示，不阻塞
            return CheckResult(ok=False, tasks=unmet)

        return CheckResult(ok=True, tasks=list(self._tasks))
