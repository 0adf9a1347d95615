"""
服务注册表路由

提供服务列表、添加、删除接口。
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from statuswatch.core.deps import get_monitor
from statuswatch.models import ServiceDefinition
from statuswatch.monitor import StatusMonitor

router = APIRouter(prefix="/api/services", tags=["services"])


class ServiceCreate(BaseModel):
    """添加服务的请求体，未提供 id 时自动生成。"""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str = ""
    type: str
    description: Optional[str] = None
    url: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)


def _writable_registry(monitor: StatusMonitor):
    registry = monitor.registry
    if not hasattr(registry, "add") or not hasattr(registry, "remove"):
        raise HTTPException(status_code=405, detail="Service registry is read-only")
    return registry


@router.get("")
async def list_services(monitor: StatusMonitor = Depends(get_monitor)):
    """返回注册表中的全部服务定义。"""
    services = await monitor.registry.list()
    return [s.model_dump(mode="json", exclude_none=True) for s in services]


@router.post("", status_code=201)
async def add_service(body: ServiceCreate, monitor: StatusMonitor = Depends(get_monitor)):
    """添加一个服务；类型无法识别返回 422，id 重复返回 409。"""
    registry = _writable_registry(monitor)
    data = body.model_dump(exclude_none=True)
    data.setdefault("id", uuid.uuid4().hex[:12])
    definition = await registry.add(ServiceDefinition.model_validate(data))
    return definition.model_dump(mode="json", exclude_none=True)


@router.delete("/{service_id}")
async def remove_service(service_id: str, monitor: StatusMonitor = Depends(get_monitor)):
    registry = _writable_registry(monitor)
    removed = await registry.remove(service_id)
    return {"status": "ok", "removed": removed.id}
