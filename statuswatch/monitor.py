"""Status monitor facade: wires registry, history, poller and stats together."""
import logging
from typing import List, Optional

from statuswatch.core.config import DEFAULT_GAME_PORT, PORT_TIMEOUT_SECONDS, Settings
from statuswatch.history import HistoryBuffer
from statuswatch.models import (
    GameServerProbeResult,
    HttpProbeResult,
    ProbeResult,
    ReachabilityProbeResult,
    Snapshot,
    StatusSummary,
    UptimeStats,
)
from statuswatch.probes import ProbeTimeouts, check_game_server, check_port, check_reachability, check_url
from statuswatch.registry import FileServiceRegistry, ServiceRegistry
from statuswatch.scheduler import Poller
from statuswatch.stats import StatsAggregator

logger = logging.getLogger(__name__)


class StatusMonitor:
    """Owns one history buffer and exposes checks, history and stats to callers."""

    def __init__(
        self,
        registry: ServiceRegistry,
        history: Optional[HistoryBuffer] = None,
        timeouts: ProbeTimeouts = ProbeTimeouts(),
        poll_interval: Optional[float] = None,
    ) -> None:
        self.registry = registry
        self.history_buffer = history if history is not None else HistoryBuffer()
        self.timeouts = timeouts
        self.poller = Poller(registry, self.history_buffer, timeouts=timeouts)
        if poll_interval is not None:
            self.poller.interval = poll_interval
        self.stats = StatsAggregator(self.history_buffer)

    @classmethod
    def from_settings(cls, cfg: Settings, services_file: Optional[str] = None) -> "StatusMonitor":
        timeouts = ProbeTimeouts(
            http=cfg.http_timeout,
            port=cfg.port_timeout,
            game=cfg.game_timeout,
            reachability_port=cfg.reachability_port_timeout,
        )
        return cls(
            FileServiceRegistry(services_file or cfg.services_file),
            history=HistoryBuffer(cfg.history_capacity),
            timeouts=timeouts,
            poll_interval=cfg.poll_interval,
        )

    async def run_check_cycle(self) -> List[ProbeResult]:
        return await self.poller.run_check_cycle()

    def history(self) -> tuple[Snapshot, ...]:
        return self.history_buffer.all()

    def stats_for(self, service_id: str) -> UptimeStats:
        return self.stats.stats_for(service_id)

    def summary(self) -> StatusSummary:
        return self.stats.summary()

    # 临时检查：不需要在注册表中登记，结果也不写入历史
    async def probe_http(self, url: str) -> HttpProbeResult:
        return await check_url(url, timeout=self.timeouts.http)

    async def probe_game_server(self, host: str, port: int = DEFAULT_GAME_PORT) -> GameServerProbeResult:
        return await check_game_server(host, port, timeout=self.timeouts.game)

    async def probe_reachability(self, host: str) -> ReachabilityProbeResult:
        return await check_reachability(host, port_timeout=self.timeouts.reachability_port)

    async def probe_port(self, host: str, port: int) -> ProbeResult:
        # 临时端口检查用 check_port 自身的 5s 超时，timeouts.port 只用于定时检查
        return await check_port(host, port, PORT_TIMEOUT_SECONDS)
