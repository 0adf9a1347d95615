"""
主机可达性检查（"ping" 类型）。

不发送 ICMP echo：非特权进程无法创建原始 ICMP 套接字。
改为依次探测常见端口，全部关闭时再做一次域名解析作为兜底。
"""
import asyncio
import logging
import socket
import time

from statuswatch.core.config import REACHABILITY_PORT_TIMEOUT_SECONDS
from statuswatch.models import ReachabilityProbeResult
from statuswatch.probes.tcp import check_port, elapsed_ms

logger = logging.getLogger(__name__)

COMMON_PORTS = (80, 443, 22, 21)
RESOLVED_NOTE = "Host resolved but no open ports found"
UNREACHABLE_ERROR = "Host unreachable"


async def resolve_host(host: str) -> None:
    """非阻塞地解析主机名，失败时抛出 OSError。"""
    loop = asyncio.get_running_loop()
    await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)


async def check_reachability(
    host: str,
    port_timeout: float = REACHABILITY_PORT_TIMEOUT_SECONDS,
) -> ReachabilityProbeResult:
    """检查主机是否可达。

    按 80、443、22、21 的顺序逐个尝试连接，第一个成功的端口即返回在线；
    都失败时解析域名（超时同样为 port_timeout），解析成功也算在线（附带说明），
    解析失败或超时返回 "Host unreachable"。
    """
    for port in COMMON_PORTS:
        result = await check_port(host, port, port_timeout)
        if result.online:
            return ReachabilityProbeResult(online=True, port=port, response_time_ms=result.response_time_ms)
        logger.debug("Reachability %s: port %d closed (%s)", host, port, result.error)

    start = time.monotonic()
    try:
        # 系统解析器可能卡住很久，沿用单端口超时作为解析的截止时间
        await asyncio.wait_for(resolve_host(host), port_timeout)
    except asyncio.TimeoutError:
        logger.debug("Reachability %s: resolution timed out after %.1fs", host, port_timeout)
        return ReachabilityProbeResult(online=False, error=UNREACHABLE_ERROR)
    except (OSError, UnicodeError) as e:
        logger.debug("Reachability %s: resolution failed: %s", host, e)
        return ReachabilityProbeResult(online=False, error=UNREACHABLE_ERROR)

    return ReachabilityProbeResult(online=True, response_time_ms=elapsed_ms(start), note=RESOLVED_NOTE)
