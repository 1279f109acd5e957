"""
Tests for Alert Scheduler — delivery modes, batching, suppression and frequency gates.
"""

import asyncio
import time

from veracity.alerts.scheduler import AlertScheduler
from veracity.models.rule_models import AlertingPolicy, Rule


def make_rule(rule_id="rule_a", triggers=0, **alerting) -> Rule:
    rule = Rule(
        id=rule_id,
        name=f"Rule {rule_id}",
        purpose="quality",
        severity="warning",
        pattern_type="keyword",
        pattern="x",
        alerting=AlertingPolicy(**alerting) if alerting else None,
    )
    rule.usage_stats.triggers = triggers
    return rule


def test_no_policy_delivers_immediately(scheduler, sink):
    scheduler.schedule_alert(make_rule(), "hello")
    assert sink.notified == [("hello", ())]


def test_batch_delivers_once_at_batch_size(scheduler, sink):
    rule = make_rule(when_to_alert="batch", batch_size=3)

    scheduler.schedule_alert(rule, "m1")
    scheduler.schedule_alert(rule, "m2")
    assert sink.total == 0
    assert [(p.count, p.message) for p in scheduler.get_pending_alerts()] == [
        (2, "2 violations detected: m2")
    ]

    scheduler.schedule_alert(rule, "m3")
    assert sink.notified == [("3 violations detected: m3", ())]
    assert scheduler.get_pending_alerts() == []

    scheduler.schedule_alert(rule, "m4")
    assert [(p.count, p.message) for p in scheduler.get_pending_alerts()] == [
        (1, "1 violation detected: m4")
    ]


def test_batch_flush_timer_armed_once_and_cancelled_on_delivery(sink, clock):
    async def scenario():
        scheduler = AlertScheduler(sink=sink, clock=clock)
        rule = make_rule(when_to_alert="batch", batch_size=3, batch_timeout_minutes=10)
        handle = scheduler.schedule_alert(rule, "m1")
        assert handle is not None
        assert scheduler.schedule_alert(rule, "m2") is None
        scheduler.schedule_alert(rule, "m3")
        return handle

    handle = asyncio.run(scenario())
    assert handle.cancelled()
    assert len(sink.notified) == 1


def test_batch_timeout_flushes_partial_batch(sink, clock):
    async def scenario():
        scheduler = AlertScheduler(sink=sink, clock=clock)
        rule = make_rule(when_to_alert="batch", batch_size=5, batch_timeout_minutes=0.0005)
        scheduler.schedule_alert(rule, "only one")
        assert sink.total == 0
        await asyncio.sleep(0.2)
        return scheduler

    scheduler = asyncio.run(scenario())
    assert sink.notified == [("1 violation detected: only one", ())]
    assert scheduler.get_pending_alerts() == []


def test_suppression_swallows_threshold_alert_and_window(scheduler, sink, clock):
    policy = {"suppress_after_triggers": 5, "suppress_duration_minutes": 60}

    for triggers in range(5):
        scheduler.schedule_alert(make_rule(triggers=triggers, **policy), f"alert {triggers}")

    # the 5th delivery crosses the threshold and is not shown
    assert [m for m, _ in sink.notified] == ["alert 0", "alert 1", "alert 2", "alert 3"]
    state = scheduler.get_state("rule_a")
    assert state.suppressed_until == clock() * 1000 + 60 * 60_000

    clock.advance(59 * 60)
    scheduler.schedule_alert(make_rule(triggers=5, **policy), "still suppressed")
    assert len(sink.notified) == 4
    assert scheduler.should_show_alert(make_rule(**policy)) is False

    clock.advance(2 * 60)
    assert scheduler.should_show_alert(make_rule(**policy)) is True


def test_clear_suppression_reopens_delivery(scheduler, sink):
    policy = {"suppress_after_triggers": 1}
    scheduler.schedule_alert(make_rule(**policy), "first")
    assert sink.total == 0
    assert scheduler.should_show_alert(make_rule(**policy)) is False

    scheduler.clear_suppression("rule_a")
    assert scheduler.should_show_alert(make_rule(**policy)) is True


def test_once_frequency_delivers_only_first(scheduler, sink, clock):
    rule = make_rule(alert_frequency="once")

    scheduler.schedule_alert(rule, "first")
    scheduler.schedule_alert(rule, "second")
    clock.advance(24 * 3600)
    scheduler.schedule_alert(rule, "third")

    assert sink.notified == [("first", ())]
    assert scheduler.should_show_alert(rule) is False
    assert scheduler.should_show_alert(rule) is False


def test_throttle_blocks_within_window(scheduler, sink, clock):
    rule = make_rule(alert_frequency="throttled", throttle_minutes=5)

    scheduler.schedule_alert(rule, "a")
    clock.advance(4 * 60)
    scheduler.schedule_alert(rule, "b")
    clock.advance(2 * 60)
    scheduler.schedule_alert(rule, "c")

    assert [m for m, _ in sink.notified] == ["a", "c"]


def test_should_show_alert_is_true_for_unknown_rule(scheduler):
    assert scheduler.should_show_alert(make_rule(alert_frequency="once")) is True


def test_delayed_alert_fires_later(sink, clock):
    async def scenario():
        scheduler = AlertScheduler(sink=sink, clock=clock)
        rule = make_rule(when_to_alert="delayed", delay_seconds=0.01)
        first = scheduler.schedule_alert(rule, "later 1")
        second = scheduler.schedule_alert(rule, "later 2")
        assert first is not second
        assert sink.total == 0
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert [m for m, _ in sink.notified] == ["later 1", "later 2"]


def test_delayed_without_event_loop_delivers_now(scheduler, sink):
    handle = scheduler.schedule_alert(make_rule(when_to_alert="delayed", delay_seconds=30), "now")
    assert handle is None
    assert sink.notified == [("now", ())]


def test_forget_cancels_timers_and_state(sink, clock):
    async def scenario():
        scheduler = AlertScheduler(sink=sink, clock=clock)
        scheduler.schedule_alert(make_rule(when_to_alert="delayed", delay_seconds=0.02), "never")
        batch_rule = make_rule("rule_b", when_to_alert="batch", batch_size=5, batch_timeout_minutes=0.0005)
        scheduler.schedule_alert(batch_rule, "never either")
        scheduler.forget("rule_a")
        scheduler.forget("rule_b")
        await asyncio.sleep(0.1)
        return scheduler

    scheduler = asyncio.run(scenario())
    assert sink.total == 0
    assert scheduler.get_state("rule_a") is None
    assert scheduler.get_pending_alerts() == []


def test_forget_during_delivery_cancels_timers_due_in_the_same_tick(clock):
    delivered = []

    class ForgettingSink:
        def notify(self, message, actions=()):
            delivered.append(message)
            scheduler.forget("rule_a")

        def log(self, message):
            pass

        def render(self, message):
            pass

    scheduler = AlertScheduler(sink=ForgettingSink(), clock=clock)

    async def scenario():
        rule = make_rule(when_to_alert="delayed", delay_seconds=0.01)
        scheduler.schedule_alert(rule, "first")
        scheduler.schedule_alert(rule, "second")
        time.sleep(0.05)  # both timers are overdue when the loop next runs
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert delivered == ["first"]


def test_manual_keeps_latest_message(scheduler, sink):
    rule = make_rule(when_to_alert="manual")

    scheduler.schedule_alert(rule, "old")
    scheduler.schedule_alert(rule, "new")

    assert sink.total == 0
    pending = scheduler.get_pending_alerts()
    assert [(p.rule_id, p.message, p.count) for p in pending] == [("rule_a", "new", 1)]

    scheduler.clear_pending_alert("rule_a")
    assert scheduler.get_pending_alerts() == []


def test_channels_map_to_sink_capabilities(scheduler, sink):
    scheduler.schedule_alert(make_rule("t", how_to_alert="toast"), "toast")
    scheduler.schedule_alert(make_rule("s", how_to_alert="statusbar"), "status")
    scheduler.schedule_alert(make_rule("l", how_to_alert="log"), "logged")
    scheduler.schedule_alert(make_rule("d", how_to_alert="dashboard"), "panel")
    scheduler.schedule_alert(make_rule("a", how_to_alert="all"), "everywhere")

    assert sink.notified == [("toast", ("Dismiss",)), ("everywhere", ())]
    assert sink.logged == ["Status bar alert: status", "Rule Alert: logged", "Rule Alert: everywhere"]
    assert sink.rendered == ["panel", "everywhere"]


def test_failing_sink_does_not_raise(clock):
    class BrokenSink:
        def notify(self, message, actions=()):
            raise RuntimeError("display gone")

        def log(self, message):
            pass

        def render(self, message):
            pass

    scheduler = AlertScheduler(sink=BrokenSink(), clock=clock)
    scheduler.schedule_alert(make_rule(), "lost")
    assert list(scheduler.delivered_alerts) == []
