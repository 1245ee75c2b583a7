"""
事件通知

下载核心通过注入的 EventBus 发布进度通知。通知是单向的：
没有订阅者时 emit 什么也不做，订阅者抛出的异常只记录日志，不影响下载流程。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from loguru import logger


class EventType(Enum):
    """事件类型定义"""

    DOWNLOAD_STATUS = "download-status"  # name, current, total
    DOWNLOAD = "download"  # name
    ASSETS_DOWNLOAD_START = "assets-download-start"
    ASSETS_DOWNLOAD_STATUS = "assets-download-status"  # d_count, total_count, name
    PACKAGE_EXTRACT = "package-extract"  # success


@dataclass
class Event:
    """事件"""

    type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]


Handler = Callable[[Event], None]


class EventListener(ABC):
    """
    事件监听器基类

    子类通过 register_handlers 声明关心的事件。
    """

    name: str = ""

    @abstractmethod
    def register_handlers(self) -> Dict[EventType, Handler]:
        """
        注册事件处理器

        Returns:
            Dict[EventType, Handler]: 事件类型到处理函数的映射
        """
        pass


class EventBus:
    """事件总线"""

    def __init__(self):
        self._handlers: Dict[EventType, List[Handler]] = {
            event_type: [] for event_type in EventType
        }
        self._listeners: Dict[str, EventListener] = {}

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: Handler) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def add_listener(self, listener: EventListener) -> bool:
        """注册监听器，同名监听器只注册一次"""
        key = listener.name or type(listener).__name__
        if key in self._listeners:
            logger.warning(f"监听器 {key} 已存在，跳过注册")
            return False

        self._listeners[key] = listener
        for event_type, handler in listener.register_handlers().items():
            self.subscribe(event_type, handler)
        logger.debug(f"监听器 {key} 注册成功")
        return True

    def remove_listener(self, name: str) -> bool:
        listener = self._listeners.pop(name, None)
        if listener is None:
            return False
        for event_type, handler in listener.register_handlers().items():
            self.unsubscribe(event_type, handler)
        return True

    def has_subscribers(self, event_type: EventType) -> bool:
        return bool(self._handlers[event_type])

    def emit(self, event_type: EventType, **payload: Any) -> None:
        """发布事件"""
        handlers = self._handlers[event_type]
        if not handlers:
            return

        event = Event(type=event_type, payload=payload)
        for handler in list(handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"事件 {event_type.value} 处理失败: {e}")


def ensure_bus(events: Optional[EventBus]) -> EventBus:
    """未注入事件总线时使用一个没有订阅者的总线"""
    return events if events is not None else EventBus()
