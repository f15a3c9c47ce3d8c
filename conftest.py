"""全局 pytest 配置 -- 测试期间使用可读的 structlog 输出"""

import pytest
from chatgate.logging_config import setup_logging


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """为整个测试会话配置 structlog"""
    setup_logging(log_format="dev", log_level="DEBUG")
