"""
可用率与延迟统计。

按需扫描历史缓冲区计算单个服务的可用率、平均响应时间，以及最近一轮检查的总体概况。
"""
import logging

from statuswatch.core.exceptions import NotFoundError
from statuswatch.history import HistoryBuffer
from statuswatch.models import StatusSummary, UptimeStats

logger = logging.getLogger(__name__)


class StatsAggregator:
    def __init__(self, history: HistoryBuffer) -> None:
        self.history = history

    def stats_for(self, service_id: str) -> UptimeStats:
        """计算指定服务的统计数据。

        平均响应时间只统计 response_time_ms > 0 的样本（离线检查的 0 不参与）。

        Raises:
            NotFoundError: 历史中没有该服务的任何检查记录。
        """
        checks = [
            check
            for snapshot in self.history.all()
            for check in snapshot.checks
            if check.service_id == service_id
        ]
        if not checks:
            raise NotFoundError("No data found for service", detail=service_id)

        total = len(checks)
        online = sum(1 for c in checks if c.online)
        samples = [c.response_time_ms for c in checks if c.response_time_ms > 0]
        average = round(sum(samples) / len(samples), 2) if samples else 0.0

        return UptimeStats(
            service_id=service_id,
            total_checks=total,
            online_checks=online,
            offline_checks=total - online,
            uptime_percentage=round(online / total * 100, 2),
            average_response_time_ms=average,
            last_checked=checks[-1].timestamp,
        )

    def summary(self) -> StatusSummary:
        """最近一轮检查中在线服务的数量与比例。"""
        latest = self.history.latest()
        if latest is None:
            return StatusSummary()
        total = len(latest.checks)
        online = sum(1 for c in latest.checks if c.online)
        return StatusSummary(
            total_services=total,
            online_services=online,
            uptime_percentage=round(online / total * 100, 1) if total else 0.0,
            checked_at=latest.timestamp,
        )
