"""
HTTP 客户端工具函数
使用全局 httpx.AsyncClient 复用连接，向私有 API 转发请求
"""
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from aibrain2api.config import Settings
from aibrain2api.exceptions import BackendNonSuccessStatus, BackendUnreachable
from aibrain2api.utils.logger import get_logger

logger = get_logger(__name__)

# 全局异步客户端单例
_async_client: Optional[httpx.AsyncClient] = None
_async_client_http2: Optional[bool] = None

# 连接超时（秒）
CONNECT_TIMEOUT = 5.0


def build_headers() -> Dict[str, str]:
    """构建转发请求头"""
    return {
        'Content-Type': 'application/json',
        'Accept': 'application/json, text/event-stream',
    }


def build_timeout(app_settings: Settings) -> httpx.Timeout:
    """按配置构建单次请求的超时"""
    return httpx.Timeout(app_settings.request_timeout, connect=CONNECT_TIMEOUT)


async def get_async_client(app_settings: Settings) -> httpx.AsyncClient:
    """
    获取全局异步HTTP客户端单例
    使用连接池复用TCP连接，不阻塞事件循环

    连接池按配置中的 http2 开关创建；开关变化时重建客户端。
    超时随每次请求传入，见 build_timeout。

    Returns:
        httpx.AsyncClient实例
    """
    global _async_client, _async_client_http2
    if _async_client is not None and not _async_client.is_closed and _async_client_http2 != app_settings.http2:
        await close_async_client()

    if _async_client is None or _async_client.is_closed:
        limits = httpx.Limits(
            max_keepalive_connections=20,  # 保持活跃的连接数
            max_connections=100,            # 最大连接数
            keepalive_expiry=30.0           # 连接保持时间（秒）
        )
        _async_client = httpx.AsyncClient(
            limits=limits,
            timeout=build_timeout(app_settings),
            http2=app_settings.http2,
            follow_redirects=True
        )
        _async_client_http2 = app_settings.http2
        logger.debug(f"已创建全局异步HTTP客户端: http2={app_settings.http2}")
    return _async_client


async def close_async_client():
    """
    关闭全局异步客户端
    应在应用关闭时调用，释放资源
    """
    global _async_client, _async_client_http2
    if _async_client is not None and not _async_client.is_closed:
        await _async_client.aclose()
        logger.debug("已关闭全局异步HTTP客户端")
    _async_client = None
    _async_client_http2 = None


async def post_json(app_settings: Settings, payload: Dict[str, Any]) -> str:
    """
    向 target_base_url 发送非流式请求并返回完整响应体

    Raises:
        BackendUnreachable: 连接目标服务失败
        BackendNonSuccessStatus: 目标服务返回非 200 状态
    """
    url = app_settings.target_base_url
    try:
        client = await get_async_client(app_settings)
        response = await client.post(
            url,
            headers=build_headers(),
            json=payload,
            timeout=build_timeout(app_settings),
        )
    except httpx.RequestError as e:
        logger.error(f"连接到目标API失败 POST {url}: {e}")
        raise BackendUnreachable() from e

    if response.status_code != 200:
        logger.error(f"目标API返回非200状态: {response.status_code}")
        raise BackendNonSuccessStatus(response.status_code, response.text)

    return response.text


async def open_stream(app_settings: Settings, payload: Dict[str, Any]) -> httpx.Response:
    """
    向 target_base_url 发送流式请求，状态码校验通过后返回尚未读取响应体的 Response

    调用方负责通过 iter_stream_lines 消费并关闭响应。

    Raises:
        BackendUnreachable: 连接目标服务失败
        BackendNonSuccessStatus: 目标服务返回非 200 状态
    """
    url = app_settings.target_base_url
    try:
        client = await get_async_client(app_settings)
        request = client.build_request(
            'POST',
            url,
            headers=build_headers(),
            json=payload,
            timeout=build_timeout(app_settings),
        )
        response = await client.send(request, stream=True)
    except httpx.RequestError as e:
        logger.error(f"连接到目标API失败 POST {url}: {e}")
        raise BackendUnreachable() from e

    if response.status_code != 200:
        try:
            body = (await response.aread()).decode('utf-8', errors='replace')
        except httpx.HTTPError as e:
            logger.error(f"读取目标错误响应失败: {e}")
            body = ''
        finally:
            await response.aclose()
        logger.error(f"流式响应状态码错误: {response.status_code}")
        raise BackendNonSuccessStatus(response.status_code, body)

    return response


async def iter_stream_lines(response: httpx.Response) -> AsyncIterator[str]:
    """
    逐行读取流式响应

    读取过程中的传输错误只记录日志，不向调用方抛出：
    此时响应头已发送，流直接结束即可。
    """
    line_count = 0
    try:
        async for line in response.aiter_lines():
            line_count += 1
            yield line
    except httpx.HTTPError as e:
        logger.error(f"SSE流读取过程中发生错误: {e}")
    finally:
        await response.aclose()
        logger.debug(f"流式响应接收结束，共处理 {line_count} 行")
