"""数据模型 -- CheckResult、Subject、ChatRef、键盘按钮

CheckResult 是 Checker 的唯一输出类型，构造后不可变。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CheckResult(BaseModel):
    """单次验证结果

    只有 ok=True 且 cacheable=True 的结果会被写入缓存；
    meta 仅用于观测，不参与控制流。
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: bool = Field(description="验证是否通过")
    tasks: list[Any] | None = Field(
        default=None,
        description="未完成的 Task 列表（ok=False 时用于提示用户）",
    )
    meta: dict[str, Any] = Field(default_factory=dict, description="诊断元数据")
    cacheable: bool = Field(
        default=True,
        description="ok=True 时是否允许写入跨请求缓存",
    )


class Subject(BaseModel):
    """被验证的用户"""

    id: int = Field(description="用户唯一标识")
    first_name: str | None = Field(default=None, description="名")
    username: str | None = Field(default=None, description="用户名（不含 @）")
    language_code: str | None = Field(default=None, description="IETF 语言标签")
    is_premium: bool | None = Field(default=None, description="是否为付费用户")


class ChatRef(BaseModel):
    """请求所在会话"""

    id: int = Field(description="会话唯一标识")


class Button(BaseModel):
    """URL 按钮"""

    text: str = Field(description="按钮文字")
    url: str = Field(description="跳转地址")


class InlineKeyboard(BaseModel):
    """内联键盘，每行若干按钮"""

    rows: list[list[Button]] = Field(default_factory=list, description="按钮行")

    def url(self, text: str, url: str) -> "InlineKeyboard":
        """追加独占一行的 URL 按钮"""
        self.rows.append([Button(text=text, url=url)])
        return self
