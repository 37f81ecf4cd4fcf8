"""
事件总线 - 内存级事件日志
业务服务在提交事务后发布事件，/events 接口按序号增量拉取
"""
from typing import Dict, List, Any
from dataclasses import dataclass
from datetime import datetime
from collections import deque
import logging
import threading

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """事件基类"""
    event_type: str
    timestamp: datetime
    data: Dict[str, Any]
    source: str  # 触发来源（服务名）
    event_id: int = 0  # 发布时由总线分配

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": getattr(self.event_type, "value", self.event_type),
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "data": self.data,
        }


class EventBus:
    """
    内存级事件总线（线程安全单例模式）

    使用方式：
    1. 发布事件：event_bus.publish(Event(...))
    2. 增量读取：event_bus.get_since(last_event_id)
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._event_history: deque = deque(maxlen=500)
        self._last_event_id = 0
        self._history_lock = threading.Lock()
        self._initialized = True
        logger.info("EventBus initialized")

    def publish(self, event: Event) -> Event:
        """
        发布事件

        序号分配与写入历史在同一把锁内完成，历史中的 event_id 严格递增
        """
        with self._history_lock:
            self._last_event_id += 1
            event.event_id = self._last_event_id
            self._event_history.append(event)
        logger.debug(f"Event {event.event_id} {event.event_type} published by {event.source}")
        return event

    def get_since(self, event_id: int = 0, limit: int = 200) -> List[Event]:
        """
        获取序号大于 event_id 的事件（最早的在前）

        客户端保存最后一个 event_id，按事件里的实体 id 失效本地缓存。
        """
        with self._history_lock:
            history = list(self._event_history)
        return [e for e in history if e.event_id > event_id][:limit]

    def clear_history(self) -> None:
        """清空事件历史（用于测试），序号继续递增"""
        with self._history_lock:
            self._event_history.clear()


# 全局事件总线实例
event_bus = EventBus()
