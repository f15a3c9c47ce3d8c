"""内置 Checker：任务聚合与外部赞助商服务"""

from .flyer import FlyerChecker
from .subgram import SubGramChecker
from .tasks import TaskChecker

__all__ = ["FlyerChecker", "SubGramChecker", "TaskChecker"]
