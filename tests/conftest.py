"""
statuswatch 测试基础配置

提供本地回环 TCP 服务、已关闭端口、内存注册表、FastAPI 测试客户端等通用 fixture。
所有测试只访问 127.0.0.1，不依赖外部网络。
"""
import asyncio
import os
import socket
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# 必须在导入 statuswatch 之前设置环境变量，避免读取开发者本地 .env
os.environ["STATUSWATCH_POLLER_ENABLED"] = "false"

from statuswatch.core.config import Settings
from statuswatch.core.deps import get_monitor
from statuswatch.history import HistoryBuffer
from statuswatch.models import ServiceDefinition
from statuswatch.monitor import StatusMonitor
from statuswatch.registry import InMemoryServiceRegistry

Handler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


def make_service(id: str, type: str = "tcp", **kwargs) -> ServiceDefinition:
    """构造一条服务定义，未给出的协议字段用合理默认值填充。"""
    if type == "url":
        kwargs.setdefault("url", f"http://127.0.0.1/{id}")
    else:
        kwargs.setdefault("host", "127.0.0.1")
    if type == "tcp":
        kwargs.setdefault("port", 9)
    return ServiceDefinition(id=id, name=kwargs.pop("name", id), type=type, **kwargs)


async def _close_immediately(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    writer.close()


# ── 本地 TCP 服务 ─────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def tcp_server() -> AsyncGenerator[Callable[[Optional[Handler]], Awaitable[int]], None]:
    """启动回环 TCP 服务的工厂，返回监听端口；测试结束后全部关闭。"""
    servers = []

    async def _start(handler: Optional[Handler] = None) -> int:
        server = await asyncio.start_server(handler or _close_immediately, "127.0.0.1", 0)
        servers.append(server)
        return server.sockets[0].getsockname()[1]

    yield _start

    for server in servers:
        server.close()
        await server.wait_closed()


@pytest.fixture
def closed_port() -> int:
    """一个当前没有任何进程监听的本地端口。"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


# ── 监控实例与 API 客户端 ─────────────────────────────────────────────

@pytest.fixture
def registry() -> InMemoryServiceRegistry:
    return InMemoryServiceRegistry()


@pytest.fixture
def monitor(registry: InMemoryServiceRegistry) -> StatusMonitor:
    return StatusMonitor(registry, history=HistoryBuffer())


@pytest_asyncio.fixture
async def client(monitor: StatusMonitor) -> AsyncGenerator[AsyncClient, None]:
    """提供配置好依赖覆盖的异步 HTTP 测试客户端。"""
    from statuswatch.main import create_app

    app = create_app(monitor, Settings(poller_enabled=False))
    app.dependency_overrides[get_monitor] = lambda: monitor

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
