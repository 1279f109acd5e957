"""
Alert Sinks — where delivered alerts end up.

A sink exposes three capabilities: notify (a popup-style message, optionally
with action labels), log (one line in the log stream) and render (an entry in
the alerts panel). The scheduler maps each AlertChannel onto them.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Protocol, Sequence

from pydantic import BaseModel, Field

logger = logging.getLogger("veracity.alerts")


class AlertSink(Protocol):
    def notify(self, message: str, actions: Sequence[str] = ()) -> None: ...

    def log(self, message: str) -> None: ...

    def render(self, message: str) -> None: ...


class FeedItem(BaseModel):
    kind: str = Field(..., description="notify | render")
    message: str
    actions: list[str] = Field(default_factory=list)
    timestamp: float = Field(default_factory=time.time)


class LoggingAlertSink:
    """
    Sink backed by the logging tree.

    Notifications and panel renders are also kept in a bounded feed, which
    the HTTP surface exposes so a dashboard can poll it.
    """

    def __init__(self, feed_size: int = 100) -> None:
        self.feed: deque[FeedItem] = deque(maxlen=feed_size)

    def notify(self, message: str, actions: Sequence[str] = ()) -> None:
        logger.warning(f"Veracity: {message}")
        self.feed.append(FeedItem(kind="notify", message=message, actions=list(actions)))

    def log(self, message: str) -> None:
        logger.info(message)

    def render(self, message: str) -> None:
        logger.info(f"Dashboard alert: {message}")
        self.feed.append(FeedItem(kind="render", message=message))

    def recent(self, count: int = 50) -> list[FeedItem]:
        if count <= 0:
            return []
        return list(self.feed)[-count:]
