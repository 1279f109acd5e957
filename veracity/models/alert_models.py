"""
Alert State Models — per-rule scheduling state held by the AlertScheduler.
"""

from __future__ import annotations

from pydantic import BaseModel


class PendingBatch(BaseModel):
    message: str
    count: int = 1
    first_timestamp: float  # epoch ms


class AlertState(BaseModel):
    """Scheduling state for one rule id. Times are epoch milliseconds."""

    pending_batch: PendingBatch | None = None
    last_alert_time: float | None = None
    suppressed_until: float | None = None
    delivered: int = 0


class PendingAlert(BaseModel):
    rule_id: str
    message: str
    count: int


class DeliveredAlert(BaseModel):
    """An alert that reached at least one channel."""

    rule_id: str
    rule_name: str
    channel: str
    message: str
    timestamp: float  # epoch ms
