"""
检查调度器。

run_check_cycle() 并发执行所有服务的探测（全部完成才返回，单个失败不影响其它服务），
把结果组装成快照写入历史缓冲区。同一时间最多只有一轮检查在运行：
定时器触发和按需调用撞在一起时，后到的调用直接等待正在进行的那一轮。
"""
import asyncio
import logging
import time
from typing import List, Optional

from statuswatch.core.config import POLL_INTERVAL_SECONDS
from statuswatch.core.exceptions import UnsupportedKindError
from statuswatch.history import HistoryBuffer
from statuswatch.models import ProbeResult, Snapshot, utcnow
from statuswatch.probes import ProbeTimeouts, run_probe
from statuswatch.registry import ServiceRegistry

logger = logging.getLogger(__name__)


class Poller:
    def __init__(
        self,
        registry: ServiceRegistry,
        history: HistoryBuffer,
        timeouts: ProbeTimeouts = ProbeTimeouts(),
        interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.registry = registry
        self.history = history
        self.timeouts = timeouts
        self.interval = interval
        self._inflight: Optional[asyncio.Task] = None
        self._loop_task: Optional[asyncio.Task] = None

    @property
    def cycle_running(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def run_check_cycle(self) -> List[ProbeResult]:
        """执行一轮检查并返回每个服务的结果；已有一轮在运行时复用其结果。"""
        if self.cycle_running:
            logger.info("Check cycle already in progress, waiting for it")
        else:
            self._inflight = asyncio.create_task(self._cycle())
        # shield: 调用方被取消（例如 HTTP 客户端断开）时不能连带取消共享的这一轮
        return list(await asyncio.shield(self._inflight))

    async def _cycle(self) -> List[ProbeResult]:
        start = time.monotonic()
        definitions = await self.registry.list()
        logger.debug("Check cycle started for %d service(s)", len(definitions))

        outcomes = await asyncio.gather(
            *(run_probe(d, self.timeouts) for d in definitions),
            return_exceptions=True,
        )

        results: List[ProbeResult] = []
        for definition, outcome in zip(definitions, outcomes):
            if isinstance(outcome, UnsupportedKindError):
                logger.warning("Skipping service %s: unsupported type %r", definition.id, definition.type)
                continue
            if isinstance(outcome, Exception):
                logger.warning("Probe for service %s failed unexpectedly: %r", definition.id, outcome)
                results.append(ProbeResult(
                    service_id=definition.id,
                    online=False,
                    error=str(outcome) or outcome.__class__.__name__,
                ))
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            results.append(outcome.model_copy(update={"service_id": definition.id}))

        self.history.append(Snapshot(timestamp=utcnow(), checks=tuple(results)))
        online = sum(1 for r in results if r.online)
        logger.info(
            "Check cycle finished: %d/%d online in %.2fs",
            online, len(results), time.monotonic() - start,
        )
        return results

    async def poll_forever(self, run_immediately: bool = True) -> None:
        """定时检查循环，按固定频率触发，单轮出错只记录日志。"""
        logger.info("Poller started (interval=%ss)", self.interval)
        if not run_immediately:
            await asyncio.sleep(self.interval)
        while True:
            start = time.monotonic()
            try:
                await self.run_check_cycle()
            except Exception:
                logger.exception("Error in check cycle")
            await asyncio.sleep(max(0.0, self.interval - (time.monotonic() - start)))

    def start(self, run_immediately: bool = True) -> asyncio.Task:
        if not self.running:
            self._loop_task = asyncio.create_task(self.poll_forever(run_immediately))
        return self._loop_task

    async def stop(self) -> None:
        for task in (self._loop_task, self._inflight):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._loop_task = None
        logger.info("Poller stopped")
