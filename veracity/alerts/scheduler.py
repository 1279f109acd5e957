"""
Alert Scheduler — decides whether, when and how a rule match becomes a
visible alert.

Per-rule state (pending batch, last alert time, suppression window) lives in
an AlertState keyed by rule id and owned by one scheduler instance. Delayed
alerts and batch flushes run on asyncio timer handles of the running loop, so
they can be cancelled when a batch delivers early or a rule is deleted.

Gating (suppression window, throttle, once) is applied only at delivery:
schedule_alert never refuses a call up front.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Callable

from veracity.alerts.sinks import AlertSink, LoggingAlertSink
from veracity.models.alert_models import (
    AlertState,
    DeliveredAlert,
    PendingAlert,
    PendingBatch,
)
from veracity.models.rule_models import (
    AlertChannel,
    AlertFrequency,
    Rule,
    WhenToAlert,
)

logger = logging.getLogger("veracity.alerts")


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class AlertScheduler:
    """Alert state machine for immediate, delayed, batch and manual rules."""

    def __init__(
        self,
        sink: AlertSink | None = None,
        clock: Callable[[], float] = time.time,
        history_size: int = 200,
    ) -> None:
        self.sink: AlertSink = sink if sink is not None else LoggingAlertSink()
        self._clock = clock
        self._states: dict[str, AlertState] = {}
        self._timers: dict[str, list[asyncio.TimerHandle]] = {}
        self._batch_timers: dict[str, asyncio.TimerHandle] = {}
        self.delivered_alerts: deque[DeliveredAlert] = deque(maxlen=history_size)

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _state(self, rule_id: str) -> AlertState:
        state = self._states.get(rule_id)
        if state is None:
            state = AlertState()
            self._states[rule_id] = state
        return state

    def get_state(self, rule_id: str) -> AlertState | None:
        state = self._states.get(rule_id)
        return state.model_copy(deep=True) if state else None

    # ── Gate ──

    def should_show_alert(self, rule: Rule) -> bool:
        state = self._states.get(rule.id)
        if state is None:
            return True

        now = self._now_ms()
        if state.suppressed_until is not None and now < state.suppressed_until:
            return False

        policy = rule.alerting
        if policy is None:
            return True

        if policy.alert_frequency == AlertFrequency.THROTTLED and policy.throttle_minutes:
            if (
                state.last_alert_time is not None
                and now - state.last_alert_time < policy.throttle_minutes * 60_000
            ):
                return False

        if policy.alert_frequency == AlertFrequency.ONCE and state.delivered > 0:
            return False

        return True

    # ── Scheduling ──

    def schedule_alert(self, rule: Rule, message: str) -> asyncio.TimerHandle | None:
        """
        Route one alert according to the rule's policy.

        Returns the timer handle when a delayed alert or a new batch armed
        one, else None.
        """
        policy = rule.alerting
        if policy is None:
            self._deliver(rule, message)
            return None

        when = policy.when_to_alert

        if when == WhenToAlert.IMMEDIATE:
            self._deliver(rule, message)
            return None

        if when == WhenToAlert.DELAYED:
            loop = _running_loop()
            if loop is None:
                logger.debug(f"No event loop; delivering delayed alert for {rule.name} now")
                self._deliver(rule, message)
                return None
            handle = loop.call_later(
                policy.delay_seconds, lambda: self._fire_delayed(rule, message, handle)
            )
            self._timers.setdefault(rule.id, []).append(handle)
            return handle

        if when == WhenToAlert.BATCH:
            return self._add_to_batch(rule, message)

        if when == WhenToAlert.MANUAL:
            self._state(rule.id).pending_batch = PendingBatch(
                message=message, count=1, first_timestamp=self._now_ms()
            )
            return None

        logger.warning(f"Unknown alert mode {when!r} for rule {rule.name}")
        return None

    def _fire_delayed(self, rule: Rule, message: str, fired: asyncio.TimerHandle) -> None:
        # TimerHandle.__eq__ compares schedule fields, so drop by identity.
        pending = [h for h in self._timers.pop(rule.id, []) if h is not fired]
        if pending:
            self._timers[rule.id] = pending
        self._deliver(rule, message)

    def _add_to_batch(self, rule: Rule, message: str) -> asyncio.TimerHandle | None:
        policy = rule.alerting
        state = self._state(rule.id)
        batch = state.pending_batch

        if batch is not None:
            batch.count += 1
            batch.message = f"{batch.count} violations detected: {message}"
            if batch.count >= policy.batch_size:
                self._flush_batch(rule)
            return None

        state.pending_batch = PendingBatch(
            message=f"1 violation detected: {message}",
            count=1,
            first_timestamp=self._now_ms(),
        )
        if policy.batch_size <= 1:
            self._flush_batch(rule)
            return None

        loop = _running_loop()
        if loop is None:
            return None
        self._cancel_batch_timer(rule.id)
        handle = loop.call_later(policy.batch_timeout_minutes * 60, self._flush_batch, rule)
        self._batch_timers[rule.id] = handle
        return handle

    def _flush_batch(self, rule: Rule) -> None:
        self._cancel_batch_timer(rule.id)
        state = self._states.get(rule.id)
        if state is None or state.pending_batch is None:
            return
        batch = state.pending_batch
        state.pending_batch = None
        self._deliver(rule, batch.message)

    def _cancel_batch_timer(self, rule_id: str) -> None:
        handle = self._batch_timers.pop(rule_id, None)
        if handle is not None:
            handle.cancel()

    # ── Delivery ──

    def _deliver(self, rule: Rule, message: str) -> bool:
        if not self.should_show_alert(rule):
            logger.debug(f"Alert for rule {rule.name} gated")
            return False

        state = self._state(rule.id)
        now = self._now_ms()
        state.last_alert_time = now

        policy = rule.alerting
        if policy is not None and policy.suppress_after_triggers:
            if rule.usage_stats.triggers + 1 >= policy.suppress_after_triggers:
                state.suppressed_until = now + policy.suppress_duration_minutes * 60_000
                logger.info(
                    f"Rule {rule.name} suppressed for {policy.suppress_duration_minutes} minutes"
                )
                return False

        channel = policy.how_to_alert if policy is not None else AlertChannel.NOTIFICATION
        try:
            self._dispatch(channel, message)
        except Exception as e:
            logger.error(f"Alert sink failed for rule {rule.name}: {e}")
            return False

        state.delivered += 1
        self.delivered_alerts.append(
            DeliveredAlert(
                rule_id=rule.id,
                rule_name=rule.name,
                channel=channel.value,
                message=message,
                timestamp=now,
            )
        )
        return True

    def _dispatch(self, channel: AlertChannel, message: str) -> None:
        if channel == AlertChannel.NOTIFICATION:
            self.sink.notify(message)
        elif channel == AlertChannel.TOAST:
            self.sink.notify(message, ("Dismiss",))
        elif channel == AlertChannel.STATUSBAR:
            self.sink.log(f"Status bar alert: {message}")
        elif channel == AlertChannel.LOG:
            self.sink.log(f"Rule Alert: {message}")
        elif channel == AlertChannel.DASHBOARD:
            self.sink.render(message)
        elif channel == AlertChannel.ALL:
            self.sink.notify(message)
            self.sink.log(f"Rule Alert: {message}")
            self.sink.render(message)

    # ── Management ──

    def get_pending_alerts(self) -> list[PendingAlert]:
        return [
            PendingAlert(rule_id=rule_id, message=s.pending_batch.message, count=s.pending_batch.count)
            for rule_id, s in self._states.items()
            if s.pending_batch is not None
        ]

    def clear_pending_alert(self, rule_id: str) -> None:
        self._cancel_batch_timer(rule_id)
        state = self._states.get(rule_id)
        if state is not None:
            state.pending_batch = None

    def clear_suppression(self, rule_id: str) -> None:
        state = self._states.get(rule_id)
        if state is not None:
            state.suppressed_until = None

    def forget(self, rule_id: str) -> None:
        """Drop all state and timers for a rule id (used when the rule is deleted)."""
        for handle in self._timers.pop(rule_id, []):
            handle.cancel()
        self._cancel_batch_timer(rule_id)
        self._states.pop(rule_id, None)

    def cancel_all(self) -> None:
        for rule_id in list(self._timers):
            for handle in self._timers.pop(rule_id):
                handle.cancel()
        for rule_id in list(self._batch_timers):
            self._cancel_batch_timer(rule_id)

