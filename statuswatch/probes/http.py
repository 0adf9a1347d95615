"""
HTTP 健康检查。

向目标 URL 发送 GET 请求，状态码在 [200, 400) 内视为在线。
其它状态码不是异常，只是一个 online=False 的普通结果。
"""
import asyncio
import logging
import time
from typing import Optional

import httpx

from statuswatch.core.config import PRIMARY_TIMEOUT_SECONDS
from statuswatch.models import HttpProbeResult
from statuswatch.probes.tcp import elapsed_ms

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "Request timed out"


def is_online_status(status_code: int) -> bool:
    return 200 <= status_code < 400


async def check_url(
    url: str,
    timeout: float = PRIMARY_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
) -> HttpProbeResult:
    """执行 HTTP 健康检查。

    Args:
        url: 目标地址。
        timeout: 整个请求的超时（秒）。
        client: 可复用的 AsyncClient；不传时每次检查新建一个。

    Returns:
        HttpProbeResult，包含 online、status_code、response_time_ms、error。
        没有收到任何响应时 status_code 为 0。
    """
    start = time.monotonic()
    try:
        # httpx 的 timeout 只限制单次连接/读写，整个请求的截止时间由 wait_for 保证
        resp = await asyncio.wait_for(_get(url, timeout, client), timeout)
    except asyncio.TimeoutError:
        logger.debug("HTTP %s exceeded %.1fs", url, timeout)
        return HttpProbeResult(online=False, status_code=0, error=TIMEOUT_ERROR)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.debug("HTTP %s failed: %r", url, e)
        return HttpProbeResult(online=False, status_code=0, error=_describe(e)[:500])

    response_time = elapsed_ms(start)
    if is_online_status(resp.status_code):
        return HttpProbeResult(online=True, status_code=resp.status_code, response_time_ms=response_time)
    return HttpProbeResult(
        online=False,
        status_code=resp.status_code,
        error=f"Request failed with status code {resp.status_code}",
    )


async def _get(url: str, timeout: float, client: Optional[httpx.AsyncClient]) -> httpx.Response:
    if client is None:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
            return await own_client.get(url)
    return await client.get(url, timeout=timeout, follow_redirects=True)


def _describe(exc: Exception) -> str:
    # httpx 的超时异常经常没有消息文本
    text = str(exc)
    if text:
        return text
    if isinstance(exc, httpx.TimeoutException):
        return TIMEOUT_ERROR
    return exc.__class__.__name__
