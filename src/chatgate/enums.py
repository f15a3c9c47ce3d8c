"""枚举定义 -- 成员状态、外部服务状态与赞助商动作"""

from enum import StrEnum


class MemberStatus(StrEnum):
    """频道成员状态，只有 LEFT 视为未完成"""

    CREATOR = "creator"
    ADMINISTRATOR = "administrator"
    MEMBER = "member"
    RESTRICTED = "restricted"
    LEFT = "left"
    KICKED = "kicked"


class ServiceStatus(StrEnum):
    """外部服务响应状态"""

    OK = "ok"
    # 用户需要完成赞助商动作
    WARNING = "warning"
    ERROR = "error"


class SponsorStatus(StrEnum):
    """赞助商订阅状态"""

    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"


class SponsorAction(StrEnum):
    """赞助商列表管理方式

    - SUBSCRIBE: 列表固定给用户一段时间，重复请求同一 user_id 即可复查
    - NEWTASK: 列表不固定，每次请求重新组装
    - TASK: 条件固定，订阅成功后下次请求重新选择列表
    """

    SUBSCRIBE = "subscribe"
    NEWTASK = "newtask"
    TASK = "task"
