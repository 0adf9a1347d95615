"""
探测策略包。

每种服务类型对应一个探测函数，全部是 async 且从不抛出异常：
失败一律编码为 online=False 的结果。run_probe 按 ServiceDefinition 的类型分派。
"""
from dataclasses import dataclass

from statuswatch.core.config import (
    DEFAULT_GAME_PORT,
    PRIMARY_TIMEOUT_SECONDS,
    REACHABILITY_PORT_TIMEOUT_SECONDS,
)
from statuswatch.core.exceptions import UnsupportedKindError
from statuswatch.models import HttpProbeResult, ProbeResult, ServiceDefinition, ServiceKind
from statuswatch.probes.gameserver import check_game_server
from statuswatch.probes.http import check_url
from statuswatch.probes.reachability import check_reachability
from statuswatch.probes.tcp import check_port


__all__ = [
    "ProbeTimeouts",
    "check_game_server",
    "check_port",
    "check_reachability",
    "check_url",
    "run_probe",
]


@dataclass(frozen=True)
class ProbeTimeouts:
    """调度器使用的各类探测超时（秒）。"""
    http: float = PRIMARY_TIMEOUT_SECONDS
    port: float = PRIMARY_TIMEOUT_SECONDS
    game: float = PRIMARY_TIMEOUT_SECONDS
    reachability_port: float = REACHABILITY_PORT_TIMEOUT_SECONDS


async def run_probe(definition: ServiceDefinition, timeouts: ProbeTimeouts = ProbeTimeouts()) -> ProbeResult:
    """根据服务类型分派执行对应的检查。

    Args:
        definition: 服务定义。
        timeouts: 各类探测的超时配置。

    Returns:
        探测结果，尚未绑定 service_id。

    Raises:
        UnsupportedKindError: 服务类型无法识别。
    """
    kind = definition.kind
    if kind is ServiceKind.HTTP:
        if not definition.url:
            return HttpProbeResult(online=False, error="No URL configured")
        return await check_url(definition.url, timeout=timeouts.http)
    elif kind is ServiceKind.TCP_PORT:
        if not definition.port:
            return ProbeResult(online=False, error="No port configured")
        return await check_port(definition.host or "localhost", definition.port, timeouts.port)
    elif kind is ServiceKind.GAME_SERVER:
        return await check_game_server(
            definition.host or "localhost",
            definition.port or DEFAULT_GAME_PORT,
            timeout=timeouts.game,
        )
    elif kind is ServiceKind.REACHABILITY:
        return await check_reachability(definition.host or "localhost", port_timeout=timeouts.reachability_port)
    else:
        raise UnsupportedKindError(definition.type, service_id=definition.id)
