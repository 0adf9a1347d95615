"""
监控引擎的 Pydantic 数据模型。

服务定义来自外部注册表；探测结果、快照一经产生即不可变（frozen）。
"""
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator, model_validator

UTC = timezone.utc


def utcnow() -> datetime:
    return datetime.now(UTC)


class ServiceKind(str, enum.Enum):
    """服务类型，取值与注册表文件中的 type 字段一致。"""
    HTTP = "url"
    TCP_PORT = "tcp"
    GAME_SERVER = "minecraft"
    REACHABILITY = "ping"


class ServiceDefinition(BaseModel):
    """注册表中的一条服务定义（对引擎只读）。

    type 保留原始字符串，未知类型的定义依然可以加载，由调度器决定如何处理。
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    name: str = ""
    type: str
    description: Optional[str] = None
    url: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # 手写的配置文件里 id 常常是数字
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def kind(self) -> Optional[ServiceKind]:
        try:
            return ServiceKind(self.type)
        except ValueError:
            return None


class ProbeResult(BaseModel):
    """一次探测的结果，TCP 端口探测直接使用此基类。"""
    model_config = ConfigDict(frozen=True)

    service_id: Optional[str] = None
    online: bool
    response_time_ms: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=utcnow)
    error: Optional[str] = None

    @model_validator(mode="after")
    def _offline_has_no_timing(self) -> "ProbeResult":
        if not self.online and self.response_time_ms != 0:
            raise ValueError("response_time_ms must be 0 when online is false")
        return self


class HttpProbeResult(ProbeResult):
    status_code: int = 0


class GameServerProbeResult(ProbeResult):
    players: int = 0
    max_players: int = 0
    version: Optional[str] = None
    motd: Optional[str] = None


class ReachabilityProbeResult(ProbeResult):
    port: Optional[int] = None
    note: Optional[str] = None


class Snapshot(BaseModel):
    """一轮检查的全部结果，按服务定义顺序排列。"""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utcnow)
    checks: tuple[SerializeAsAny[ProbeResult], ...] = ()


class UptimeStats(BaseModel):
    """单个服务基于历史缓冲区的统计，按需计算，不存储。"""
    service_id: str
    total_checks: int
    online_checks: int
    offline_checks: int
    uptime_percentage: float
    average_response_time_ms: float
    last_checked: Optional[datetime] = None


class StatusSummary(BaseModel):
    """最近一轮检查的总体概况。"""
    total_services: int = 0
    online_services: int = 0
    uptime_percentage: float = 0.0
    checked_at: Optional[datetime] = None
