"""
服务状态路由

即时检查、检查历史、单服务可用率统计。
"""
from fastapi import APIRouter, Depends

from statuswatch.core.deps import get_monitor
from statuswatch.models import StatusSummary, UptimeStats
from statuswatch.monitor import StatusMonitor

router = APIRouter(prefix="/api", tags=["status"])


@router.get("/status")
async def current_status(monitor: StatusMonitor = Depends(get_monitor)):
    """立即执行一轮检查并返回每个服务的结果（同时写入历史）。"""
    results = await monitor.run_check_cycle()
    return [r.model_dump(mode="json") for r in results]


@router.get("/status/summary", response_model=StatusSummary)
async def status_summary(monitor: StatusMonitor = Depends(get_monitor)):
    """最近一轮检查的在线数量与比例，不触发新的检查。"""
    return monitor.summary()


@router.get("/status/history")
async def status_history(monitor: StatusMonitor = Depends(get_monitor)):
    """返回保留的全部快照，最旧在前。"""
    return [s.model_dump(mode="json") for s in monitor.history()]


@router.get("/stats/{service_id}", response_model=UptimeStats)
async def service_stats(service_id: str, monitor: StatusMonitor = Depends(get_monitor)):
    """单个服务的可用率与平均响应时间，没有历史数据时返回 404。"""
    return monitor.stats_for(service_id)
