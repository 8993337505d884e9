"""异步事件订阅列表

服务通过显式的订阅列表通知感兴趣的观察者，发送方与消费方互不耦合。
是否存在订阅者本身就是一种策略开关（例如：没有错误订阅者时异常会被重新抛出）。

使用示例:
    service.error.subscribe(on_error)

    async def on_error(args: SendEventArgs) -> None:
        logger.warning(f"Send failed: {args.error}")
"""

import inspect
from typing import Any, Awaitable, Callable, Generic, List, TypeVar, Union

T = TypeVar("T")

EventHandler = Callable[[T], Union[Awaitable[Any], Any]]


class AsyncEvent(Generic[T]):
    """
    异步事件

    处理器可以是普通函数或协程函数，按订阅顺序依次调用。
    """

    def __init__(self) -> None:
        self._handlers: List[EventHandler] = []

    @property
    def has_subscribers(self) -> bool:
        """是否存在订阅者"""
        return bool(self._handlers)

    def subscribe(self, handler: EventHandler) -> EventHandler:
        """
        订阅事件

        返回处理器本身，因此也可以作为装饰器使用。
        """
        if not callable(handler):
            raise TypeError(f"Event handler must be callable, got {type(handler).__name__}")
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: EventHandler) -> None:
        """取消订阅（未订阅时忽略）"""
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    def clear(self) -> None:
        """移除全部订阅者"""
        self._handlers.clear()

    async def emit(self, args: T) -> None:
        """
        触发事件

        处理器抛出的异常会传播给调用方。
        """
        for handler in list(self._handlers):
            result = handler(args)
            if inspect.isawaitable(result):
                await result

    def __len__(self) -> int:
        return len(self._handlers)
