"""
TCP 端口探测。

尝试建立 TCP 连接，在超时前连接成功即视为在线。
"""
import asyncio
import logging
import time

from statuswatch.core.config import PORT_TIMEOUT_SECONDS
from statuswatch.models import ProbeResult

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "Connection timeout"
FAILED_ERROR = "Connection failed"


def elapsed_ms(start: float) -> int:
    """从 start（time.monotonic()）到现在经过的毫秒数。"""
    return int(round((time.monotonic() - start) * 1000))


async def check_port(host: str, port: int, timeout: float = PORT_TIMEOUT_SECONDS) -> ProbeResult:
    """执行 TCP 连接检查。

    连接在 timeout 秒内完成即为在线，response_time_ms 为建连耗时。
    超时返回 "Connection timeout"，拒绝连接等其它套接字错误返回 "Connection failed"。
    """
    start = time.monotonic()
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except asyncio.TimeoutError:
        logger.debug("TCP %s:%s timed out after %.1fs", host, port, timeout)
        return ProbeResult(online=False, error=TIMEOUT_ERROR)
    except (OSError, ValueError) as e:
        logger.debug("TCP %s:%s failed: %s", host, port, e)
        return ProbeResult(online=False, error=FAILED_ERROR)

    response_time = elapsed_ms(start)
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return ProbeResult(online=True, response_time_ms=response_time)
