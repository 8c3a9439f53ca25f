"""
连接观察者

宿主环境（IDE、监控面板等）可以注册观察者，在连接打开和关闭时收到通知。
观察者抛出的异常只记录日志，不影响连接本身。
"""

import threading
from typing import TYPE_CHECKING, List

from ..utils.logging_utils import get_logger

if TYPE_CHECKING:
    from .connection import ConnectionHandle

# 获取模块级别的日志记录器
logger = get_logger(__name__)

_observers: List["ConnectionObserver"] = []
_observers_lock = threading.Lock()


class ConnectionObserver:
    """观察者接口，默认实现均为空操作"""

    def on_open(self, handle: "ConnectionHandle") -> None:
        pass

    def on_close(self, handle: "ConnectionHandle") -> None:
        pass


def register_observer(observer: ConnectionObserver) -> None:
    with _observers_lock:
        if observer not in _observers:
            _observers.append(observer)


def unregister_observer(observer: ConnectionObserver) -> None:
    with _observers_lock:
        if observer in _observers:
            _observers.remove(observer)


def registered_observers() -> List[ConnectionObserver]:
    with _observers_lock:
        return list(_observers)


def _notify(event: str, handle: "ConnectionHandle") -> None:
    for observer in registered_observers():
        try:
            getattr(observer, event)(handle)
        except Exception as e:
            logger.warning(f"观察者 {observer!r} 处理 {event} 时出错: {str(e)}")


def notify_open(handle: "ConnectionHandle") -> None:
    _notify("on_open", handle)


def notify_close(handle: "ConnectionHandle") -> None:
    _notify("on_close", handle)
