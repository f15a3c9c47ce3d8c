"""ServiceClient -- 外部赞助商服务的 JSON POST 封装

连接失败、超时、响应体无法解码统一转换为 TransportError，不做重试。
非 2xx 响应不抛异常，连同状态码交给各 Checker 解释。
"""

import json
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field

from ..exceptions import TransportError

log = structlog.get_logger()


class ServiceReply(BaseModel):
    """外部服务响应：HTTP 状态码 + JSON 对象响应体"""

    status_code: int = Field(description="HTTP 状态码")
    data: dict[str, Any] = Field(default_factory=dict, description="解码后的响应体")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class ServiceClient:
    """外部服务 HTTP 客户端"""

    def __init__(
        self,
        base_url: str,
        timeout_s: float,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: 服务基础 URL
            timeout_s: 单次请求超时（秒）
            headers: 额外请求头（如鉴权头）
            transport: 自定义 httpx transport（测试注入 MockTransport）
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def post(self, path: str, payload: dict[str, Any] | None = None) -> httpx.Response:
        """发送 POST 请求

        Args:
            path: 相对路径（如 /check）
            payload: JSON 请求体，None 或空字典时不发送请求体

        Returns:
            httpx.Response（任意状态码）

        Raises:
            TransportError: 连接失败或超时
        """
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
            ) as http_client:
                return await http_client.post(
                    url,
                    headers=self._headers,
                    content=json.dumps(payload) if payload else None,
                )
        except httpx.HTTPError as e:
            log.warning(
                "service_request_failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(url=url, original_error=e) from e

    async def post_json(self, path: str, payload: dict[str, Any] | None = None) -> ServiceReply:
        """发送 POST 请求并解码 JSON 响应体

        非 2xx 且响应体不是 JSON 对象时，合成
        {"status": "error", "code": <HTTP 状态码>, "error": <响应文本>}。
        调用方通过 ServiceReply.is_success 区分非 2xx 响应。

        Raises:
            TransportError: 连接失败、超时，或 2xx 响应体不是 JSON 对象
        """
        response = await self.post(path, payload)
        if response.is_success:
            data = decode_json_object(response)
            return ServiceReply(status_code=response.status_code, data=data)
        try:
            data = decode_json_object(response)
        except TransportError:
            data = {
                "status": "error",
                "code": response.status_code,
                "error": response.text or response.reason_phrase,
            }
        log.warning(
            "service_non_success_status",
            url=str(response.request.url),
            status_code=response.status_code,
        )
        return ServiceReply(status_code=response.status_code, data=data)


def decode_json_object(response: httpx.Response) -> dict[str, Any]:
    """解码 JSON 对象响应体

    Raises:
        TransportError: 响应体不是合法的 JSON 对象
    """
    try:
        data = response.json()
    except ValueError as e:
        raise TransportError(url=str(response.request.url), original_error=e) from e
    if not isinstance(data, dict):
        raise TransportError(
            url=str(response.request.url),
            original_error=ValueError(f"unexpected JSON body: {type(data).__name__}"),
        )
    return data
