"""
FastAPI 依赖项模块 (FastAPI Dependencies Module)

路由通过 Depends(get_monitor) 获取应用持有的 StatusMonitor，测试中可用 dependency_overrides 替换。
Routers obtain the app-owned StatusMonitor through Depends(get_monitor); tests replace it via dependency_overrides.
"""
from fastapi import Request

from statuswatch.monitor import StatusMonitor


def get_monitor(request: Request) -> StatusMonitor:
    """返回挂在 app.state 上的监控实例 (Return the monitor stored on app.state)"""
    return request.app.state.monitor
