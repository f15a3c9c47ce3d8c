"""chatgate 测试 fixtures -- 伪造请求上下文与 Bot API"""

from collections.abc import Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from chatgate.models import ChatRef, Subject


class FakeContext:
    """最小请求上下文：from_user / chat / api / reply"""

    def __init__(self, from_user=None, chat=None, api=None) -> None:
        self.from_user = from_user
        self.chat = chat
        self.api = api
        self.reply = AsyncMock()


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def subject() -> Subject:
    """标准测试用户"""
    return Subject(id=1, first_name="Tester", username="tester", language_code="en")


@pytest.fixture
def bot_api() -> AsyncMock:
    """宿主 Bot API：用户是成员，目标是公开频道"""
    api = AsyncMock()
    api.get_chat.return_value = SimpleNamespace(
        title="News", username="news_channel", invite_link=None
    )
    api.get_chat_member.return_value = SimpleNamespace(status="member")
    return api


@pytest.fixture
def make_ctx(subject: Subject) -> Callable[..., FakeContext]:
    """请求上下文工厂，anonymous=True 时无用户"""

    def factory(anonymous: bool = False, api=None, language_code: str | None = None):
        user = None
        if not anonymous:
            user = subject
            if language_code is not None:
                user = subject.model_copy(update={"language_code": language_code})
        return FakeContext(from_user=user, chat=ChatRef(id=100), api=api)

    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
