"""
Minecraft 服务器检查。

两阶段：先做 TCP 端口检查，端口关闭直接判定离线；
端口开放后再用 SLP 查询玩家数、版本和 MOTD。查询失败但端口开放时仍判定在线，
只是缺少详细信息。
"""
import asyncio
import logging
import time
from typing import Optional

from statuswatch.core.config import DEFAULT_GAME_PORT, PRIMARY_TIMEOUT_SECONDS
from statuswatch.models import GameServerProbeResult
from statuswatch.probes.slp import query_status
from statuswatch.probes.tcp import check_port, elapsed_ms

logger = logging.getLogger(__name__)

DETAILS_ERROR = "Cannot retrieve server details"
UNKNOWN_VERSION = "Unknown"


async def check_game_server(
    host: str,
    port: Optional[int] = DEFAULT_GAME_PORT,
    timeout: float = PRIMARY_TIMEOUT_SECONDS,
) -> GameServerProbeResult:
    """执行 Minecraft 服务器检查。

    Args:
        host: 服务器地址。
        port: 端口，None 时使用 25565。
        timeout: 端口检查和状态查询各自的超时（秒）。
    """
    port = port or DEFAULT_GAME_PORT
    start = time.monotonic()

    port_check = await check_port(host, port, timeout)
    if not port_check.online:
        return GameServerProbeResult(online=False, version=None, error=port_check.error)

    try:
        status = await query_status(host, port, timeout=timeout)
    except (OSError, EOFError, ValueError, asyncio.TimeoutError) as e:
        logger.warning("Game server %s:%s accepted TCP but status query failed: %r", host, port, e)
        return GameServerProbeResult(
            online=True,
            players=0,
            max_players=0,
            version=UNKNOWN_VERSION,
            response_time_ms=port_check.response_time_ms,
            error=DETAILS_ERROR,
        )

    return GameServerProbeResult(
        online=True,
        players=status.players,
        max_players=status.max_players,
        version=status.version,
        motd=status.motd,
        response_time_ms=elapsed_ms(start),
    )
