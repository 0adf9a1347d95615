"""
statuswatch 应用入口模块 (Application Entry Module)

负责 FastAPI 应用的创建、异常处理器与路由注册，以及后台轮询任务的生命周期管理。

Creates the FastAPI application, registers exception handlers and routers, and manages
the lifecycle of the background polling task.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statuswatch import __version__
from statuswatch.core.config import Settings, settings as app_settings
from statuswatch.core.exceptions import register_exception_handlers
from statuswatch.monitor import StatusMonitor
from statuswatch.routers import public, services, status

logger = logging.getLogger(__name__)


def create_app(monitor: Optional[StatusMonitor] = None, cfg: Optional[Settings] = None) -> FastAPI:
    """
    创建 FastAPI 应用 (Create the FastAPI application)

    Args:
        monitor: 预先构造的监控实例；不传时按配置从服务文件构造。
        cfg: 配置，默认使用全局 settings。
    """
    cfg = cfg or app_settings
    monitor = monitor or StatusMonitor.from_settings(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 启动阶段：后台轮询 (Startup: background polling)
        # 同一时间只会有一轮检查在运行，即使按需检查与定时检查重叠
        if cfg.poller_enabled:
            monitor.poller.start(run_immediately=cfg.poll_on_startup)
        else:
            logger.info("Background poller disabled")

        yield

        # 关闭阶段：取消后台任务 (Shutdown: cancel background tasks)
        await monitor.poller.stop()

    app = FastAPI(
        title="statuswatch",
        description="Service status monitoring: HTTP, TCP, Minecraft and host reachability checks",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.monitor = monitor

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(services.router)  # 服务注册表 (Service registry)
    app.include_router(status.router)  # 状态、历史、统计 (Status, history, stats)
    app.include_router(public.router)  # 临时检查 (Ad-hoc checks)

    @app.get("/health")
    async def health():
        """进程存活检查 (Liveness check)"""
        return {
            "status": "ok",
            "poller_running": monitor.poller.running,
            "history_size": len(monitor.history_buffer),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app
