"""
检查历史缓冲区。

固定容量、按时间顺序排列的快照环形缓冲区，满了之后丢弃最旧的快照。
只在进程生命周期内有效，重启后清空。
"""
import logging
import threading
from collections import deque
from typing import Optional

from statuswatch.core.config import HISTORY_CAPACITY
from statuswatch.models import Snapshot

logger = logging.getLogger(__name__)


class HistoryBuffer:
    """快照历史，插入顺序即时间顺序（最旧在前）。"""

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._snapshots: deque[Snapshot] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, snapshot: Snapshot) -> None:
        with self._lock:
            if len(self._snapshots) == self.capacity:
                logger.debug("History full (%d), evicting snapshot from %s",
                             self.capacity, self._snapshots[0].timestamp.isoformat())
            self._snapshots.append(snapshot)

    def all(self) -> tuple[Snapshot, ...]:
        """返回全部快照的不可变视图，最旧在前。"""
        with self._lock:
            return tuple(self._snapshots)

    def latest(self) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshots[-1] if self._snapshots else None

    def clear(self) -> None:
        with self._lock:
            self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)
