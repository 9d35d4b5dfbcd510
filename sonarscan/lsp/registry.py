"""Handler registry for server-initiated requests and notifications."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

RequestHandler = Callable[[Any], Any]
NotificationHandler = Callable[[Any], None]


class DispatchRegistry:
    """One synchronous handler per method name; the last registration wins."""

    def __init__(self) -> None:
        self._requests: dict[str, RequestHandler] = {}
        self._notifications: dict[str, NotificationHandler] = {}

    def on_request(self, method: str, handler: RequestHandler) -> None:
        self._requests[method] = handler

    def on_notification(self, method: str, handler: NotificationHandler) -> None:
        self._notifications[method] = handler

    def request_handler(self, method: str) -> RequestHandler | None:
        return self._requests.get(method)

    def notification_handler(self, method: str) -> NotificationHandler | None:
        return self._notifications.get(method)

    def request_methods(self) -> list[str]:
        return sorted(self._requests)

    def notification_methods(self) -> list[str]:
        return sorted(self._notifications)
