"""chatgate 异常体系

ResolutionError / CheckerInitError 属于配置期错误，直接抛给调用方；
TransportError 由外部服务 Checker 在内部消化；
VerificationError 是编排器交给 on_error 钩子的兜底包装。
"""


class GateError(Exception):
    """chatgate 包基础异常"""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ResolutionError(GateError):
    """Task 无法解析为可访问的目标 URL

    添加该 Task 的操作随之失败。
    """

    def __init__(self, target: int | str, reason: str) -> None:
        """
        Args:
            target: 原始目标标识（chat id 或 @username）
            reason: 失败原因描述
        """
        super().__init__(f"无法解析任务目标 {target}: {reason}")
        self.target = target


class CheckerInitError(GateError):
    """Checker 初始化失败，gate 不可构建"""

    def __init__(self, checker: str, message: str) -> None:
        """
        Args:
            checker: Checker 名称（类名）
            message: 错误描述
        """
        super().__init__(f"{checker} 初始化失败: {message}")
        self.checker = checker


class TransportError(GateError):
    """外部服务不可达（连接失败、超时、响应体无法解码）"""

    def __init__(self, url: str, original_error: Exception) -> None:
        """
        Args:
            url: 请求地址
            original_error: 原始异常
        """
        super().__init__(f"外部服务请求失败: {url} -- {original_error}")
        self.url = url
        self.original_error = original_error


class VerificationError(GateError):
    """编排器捕获到的未处理异常，仅用于 on_error 观测"""

    def __init__(self, original_error: Exception) -> None:
        super().__init__(f"验证过程异常: {type(original_error).__name__}: {original_error}")
        self.original_error = original_error
