"""内置 Task：频道成员、Bot 启动、自定义谓词"""

from .base import BaseTask
from .bot import BotTask
from .channel import ChannelTask
from .custom import CustomTask

__all__ = ["BaseTask", "BotTask", "ChannelTask", "CustomTask"]
