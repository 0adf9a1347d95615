"""
公开检查路由

对任意 URL / Minecraft 服务器 / 主机做一次临时检查，不需要在注册表中登记，结果不写入历史。
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from statuswatch.core.config import DEFAULT_GAME_PORT
from statuswatch.core.deps import get_monitor
from statuswatch.monitor import StatusMonitor

router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/check-url")
async def check_url(url: Optional[str] = None, monitor: StatusMonitor = Depends(get_monitor)):
    if not url:
        raise HTTPException(status_code=400, detail="URL parameter is required")
    result = await monitor.probe_http(url)
    return result.model_dump(mode="json")


@router.get("/check-minecraft")
async def check_minecraft(
    host: Optional[str] = None,
    port: int = Query(DEFAULT_GAME_PORT, ge=1, le=65535),
    monitor: StatusMonitor = Depends(get_monitor),
):
    if not host:
        raise HTTPException(status_code=400, detail="Host parameter is required")
    result = await monitor.probe_game_server(host, port)
    return result.model_dump(mode="json")


@router.get("/check-host")
async def check_host(host: Optional[str] = None, monitor: StatusMonitor = Depends(get_monitor)):
    if not host:
        raise HTTPException(status_code=400, detail="Host parameter is required")
    result = await monitor.probe_reachability(host)
    return result.model_dump(mode="json")
