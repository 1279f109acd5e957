"""
Rule Engine — Evaluates enabled rules against a piece of content.

Rules run in store order. A rule whose pattern cannot be used is skipped and
logged; it never interrupts the rules after it. Each matching rule counts one
trigger per evaluate_content() call, however many times it matched.
"""

from __future__ import annotations

import logging

from veracity.alerts.scheduler import AlertScheduler
from veracity.core import pattern_matcher
from veracity.core.rule_store import RuleStore
from veracity.models.rule_models import Match, Rule

logger = logging.getLogger("veracity.rules.engine")


class RuleEngine:
    """
    Pattern-based rule engine.

    When an AlertScheduler is attached, every match is handed to it. The alert
    is scheduled before the trigger is counted, so the scheduler sees the
    number of earlier triggers.
    """

    def __init__(self, store: RuleStore, scheduler: AlertScheduler | None = None) -> None:
        self.store = store
        self.scheduler = scheduler

    def evaluate_content(self, content: str, rules: list[Rule] | None = None) -> list[Match]:
        """
        Run rules against ``content``.

        Args:
            content: Text to evaluate.
            rules: Optional subset to run instead of all enabled rules.

        Returns:
            Matches in rule order, at most one per rule.
        """
        candidates = rules if rules is not None else self.store.get_enabled_rules()
        matches: list[Match] = []

        for rule in candidates:
            if not rule.enabled:
                continue

            outcome = pattern_matcher.match(rule.pattern, rule.pattern_type, content)
            if outcome.error:
                logger.warning(f"Skipping rule '{rule.name}' ({rule.id}): {outcome.error}")
                continue
            if not outcome.matched:
                continue

            matches.append(
                Match(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    matched_text=outcome.matched_text,
                    line=pattern_matcher.line_for(content, outcome.index),
                )
            )

            if self.scheduler is not None:
                message = rule.response or f'Rule "{rule.name}" triggered: {outcome.matched_text}'
                self.scheduler.schedule_alert(rule, message)

            self.store.record_trigger(rule.id)

        if matches:
            self.store.flush()
            logger.debug(f"{len(matches)} rules matched: {[m.rule_name for m in matches]}")

        return matches
