"""
服务注册表。

引擎只依赖只读的 ServiceRegistry.list()；这里提供内存实现和文件实现。
文件实现默认读写 services.json，也接受手写的 .yaml / .yml 文件。
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional, Protocol

import yaml
from pydantic import ValidationError as PydanticValidationError

from statuswatch.core.exceptions import ConflictError, NotFoundError, UnsupportedKindError, ValidationError
from statuswatch.models import ServiceDefinition, ServiceKind

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class ServiceRegistry(Protocol):
    """服务定义的只读视图。"""

    async def list(self) -> List[ServiceDefinition]:
        ...


class InMemoryServiceRegistry:
    """进程内注册表，主要用于测试和临时检查。"""

    def __init__(self, services: Optional[List[ServiceDefinition]] = None) -> None:
        self._services: List[ServiceDefinition] = list(services or [])

    async def list(self) -> List[ServiceDefinition]:
        return list(self._services)

    async def add(self, definition: ServiceDefinition) -> ServiceDefinition:
        services = await self.list()
        _ensure_addable(services, definition)
        self._services.append(definition)
        return definition

    async def remove(self, service_id: str) -> ServiceDefinition:
        services = await self.list()
        removed = _pop_by_id(services, service_id)
        self._services = services
        return removed


class FileServiceRegistry:
    """基于文件的注册表。

    文件不存在时自动创建空列表；其它读取错误记录日志并当作空列表处理。
    """

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self._write_lock = asyncio.Lock()

    @property
    def is_yaml(self) -> bool:
        return self.path.suffix.lower() in YAML_SUFFIXES

    async def list(self) -> List[ServiceDefinition]:
        return await asyncio.to_thread(self._load)

    async def add(self, definition: ServiceDefinition) -> ServiceDefinition:
        async with self._write_lock:
            services = await self.list()
            _ensure_addable(services, definition)
            services.append(definition)
            await asyncio.to_thread(self._save, services)
        logger.info("Service added: %s (%s)", definition.id, definition.type)
        return definition

    async def remove(self, service_id: str) -> ServiceDefinition:
        async with self._write_lock:
            services = await self.list()
            removed = _pop_by_id(services, service_id)
            await asyncio.to_thread(self._save, services)
        logger.info("Service removed: %s", service_id)
        return removed

    def _load(self) -> List[ServiceDefinition]:
        if not self.path.exists():
            logger.info("Services file %s not found, creating an empty one", self.path)
            self._save([])
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) if self.is_yaml else json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error("Error loading services from %s: %s", self.path, e)
            return []

        if data is None:
            return []
        if isinstance(data, dict):
            # YAML 配置允许写成 {services: [...]}
            data = data.get("services") or []
        if not isinstance(data, list):
            logger.error("Services file %s must contain a list, got %s", self.path, type(data).__name__)
            return []

        services: List[ServiceDefinition] = []
        for idx, item in enumerate(data):
            try:
                services.append(ServiceDefinition.model_validate(item))
            except PydanticValidationError as e:
                logger.warning("Skipping invalid service entry #%d in %s: %s", idx, self.path, e)
        return services

    def _save(self, services: List[ServiceDefinition]) -> None:
        payload = [s.model_dump(mode="json", exclude_none=True) for s in services]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            if self.is_yaml:
                yaml.safe_dump(payload, f, sort_keys=False, allow_unicode=True)
            else:
                json.dump(payload, f, indent=2, ensure_ascii=False)


def _ensure_addable(services: List[ServiceDefinition], definition: ServiceDefinition) -> None:
    """写入前校验：类型必须可识别，id 不能重复，且协议字段齐全。"""
    if definition.kind is None:
        raise UnsupportedKindError(definition.type, service_id=definition.id)
    if any(s.id == definition.id for s in services):
        raise ConflictError(f"Service {definition.id!r} already exists")
    kind = definition.kind
    if kind is ServiceKind.HTTP and not definition.url:
        raise ValidationError("url is required for type 'url'", detail=definition.id)
    if kind is not ServiceKind.HTTP and not definition.host:
        raise ValidationError(f"host is required for type {definition.type!r}", detail=definition.id)
    if kind is ServiceKind.TCP_PORT and not definition.port:
        raise ValidationError("port is required for type 'tcp'", detail=definition.id)


def _pop_by_id(services: List[ServiceDefinition], service_id: str) -> ServiceDefinition:
    for idx, s in enumerate(services):
        if s.id == service_id:
            return services.pop(idx)
    raise NotFoundError("Service not found", detail=service_id)
