"""chatgate -- 对话 Bot 访问验证网关

在用户操作继续之前，由一个或多个验证策略（频道订阅、启动配套 Bot、
自定义条件、外部赞助商服务）确认通过。
"""

# 缓存
from .cache import MemoryCache, RedisCache

# Checker
from .checkers import FlyerChecker, SubGramChecker, TaskChecker

# 配置
from .config import GateConfig, load_gate_config
from .enums import MemberStatus, ServiceStatus, SponsorAction, SponsorStatus

# 异常
from .exceptions import (
    CheckerInitError,
    GateError,
    ResolutionError,
    TransportError,
    VerificationError,
)
from .i18n import get_translation, t
from .logging_config import setup_logging
from .middleware import VERIFIED_SENTINEL, VerificationMiddleware, create_verifier, make_cache_key

# 数据模型
from .models import Button, ChatRef, CheckResult, InlineKeyboard, Subject
from .protocols import BotApi, CacheAdapter, Checker, GateContext, Task

# Task
from .tasks import BotTask, ChannelTask, CustomTask

__all__ = [
    "CheckResult",
    "Subject",
    "ChatRef",
    "Button",
    "InlineKeyboard",
    "MemberStatus",
    "ServiceStatus",
    "SponsorAction",
    "SponsorStatus",
    "BotApi",
    "CacheAdapter",
    "Checker",
    "GateContext",
    "Task",
    "MemoryCache",
    "RedisCache",
    "ChannelTask",
    "BotTask",
    "CustomTask",
    "TaskChecker",
    "FlyerChecker",
    "SubGramChecker",
    "VerificationMiddleware",
    "create_verifier",
    "make_cache_key",
    "VERIFIED_SENTINEL",
    "GateConfig",
    "load_gate_config",
    "setup_logging",
    "get_translation",
    "t",
    "GateError",
    "ResolutionError",
    "CheckerInitError",
    "TransportError",
    "VerificationError",
]
