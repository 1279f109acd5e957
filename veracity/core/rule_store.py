"""
Rule Store — owns the rule set, enabled flags and usage statistics.

Rules keep insertion order; that order is the evaluation order used by the
engine and the response rewriter. Callers always receive copies, so the only
way to change a stored rule is through the store's own operations.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from veracity.config import settings
from veracity.core.errors import InvalidRuleError
from veracity.core.pattern_matcher import check_pattern
from veracity.models.rule_models import (
    Rule,
    RuleCreate,
    RulePurpose,
    RuleStats,
    RuleUpdate,
)
from veracity.storage.rule_repository import RuleRepository

logger = logging.getLogger("veracity.rules")

PURPOSE_SUGGESTIONS: dict[RulePurpose, list[str]] = {
    RulePurpose.SECURITY: [
        'Remove or secure the detected "{match}"',
        "Use environment variables for sensitive data",
        "Consider using a secrets management system",
    ],
    RulePurpose.QUALITY: [
        'Replace "{match}" with actual implementation',
        "Add proper error handling",
        "Include appropriate documentation",
    ],
    RulePurpose.COMPLIANCE: [
        "Review compliance requirements",
        "Ensure proper data handling procedures",
        "Consult with compliance team if needed",
    ],
    RulePurpose.WORKFLOW: [
        "Resolve any pending issues",
        "Update documentation if needed",
        "Follow team coding standards",
    ],
}


def _new_rule_id() -> str:
    return f"rule_{uuid.uuid4().hex[:12]}"


class RuleStore:
    """In-memory rule set with optional JSON persistence."""

    def __init__(
        self,
        repository: RuleRepository | None = None,
        strict_patterns: bool | None = None,
    ) -> None:
        self.repository = repository
        self.strict_patterns = (
            strict_patterns if strict_patterns is not None else settings.strict_patterns
        )
        self._rules: dict[str, Rule] = {}
        self._delete_listeners: list[Callable[[str], None]] = []

        if repository is not None:
            for rule in repository.load():
                self._rules[rule.id] = rule

    # ── CRUD ──

    def create_rule(self, data: RuleCreate | dict[str, Any]) -> Rule:
        """
        Store a new rule and return it.

        Raises:
            InvalidRuleError: purpose/severity/pattern_type not recognised, or
                (with strict_patterns) the pattern cannot be used.
        """
        rule_input = self._parse(RuleCreate, data)
        self._check_pattern(rule_input.name, rule_input.pattern, rule_input.pattern_type)

        now = datetime.now(timezone.utc)
        rule = Rule(
            **rule_input.model_dump(),
            id=_new_rule_id(),
            created_at=now,
            updated_at=now,
        )
        self._rules[rule.id] = rule
        self._save()
        logger.info(f"Created rule: {rule.name} ({rule.id})")
        return rule.model_copy(deep=True)

    def update_rule(self, rule_id: str, patch: RuleUpdate | dict[str, Any]) -> Rule | None:
        rule = self._rules.get(rule_id)
        if rule is None:
            return None

        changes = self._parse(RuleUpdate, patch).model_dump(exclude_unset=True)
        merged = {**rule.model_dump(), **changes}
        merged["id"] = rule.id
        merged["updated_at"] = datetime.now(timezone.utc)
        try:
            updated = Rule.model_validate(merged)
        except ValidationError as e:
            raise InvalidRuleError(str(e)) from e

        if "pattern" in changes or "pattern_type" in changes:
            self._check_pattern(updated.name, updated.pattern, updated.pattern_type)

        self._rules[rule_id] = updated
        self._save()
        logger.info(f"Updated rule: {updated.name} ({rule_id})")
        return updated.model_copy(deep=True)

    def delete_rule(self, rule_id: str) -> bool:
        if self._rules.pop(rule_id, None) is None:
            return False
        self._save()
        logger.info(f"Deleted rule: {rule_id}")
        for listener in self._delete_listeners:
            listener(rule_id)
        return True

    def get_rule(self, rule_id: str) -> Rule | None:
        rule = self._rules.get(rule_id)
        return rule.model_copy(deep=True) if rule else None

    def get_all_rules(self) -> list[Rule]:
        return [r.model_copy(deep=True) for r in self._rules.values()]

    def get_enabled_rules(self) -> list[Rule]:
        return [r.model_copy(deep=True) for r in self._rules.values() if r.enabled is True]

    def toggle_rule(self, rule_id: str, enabled: bool) -> bool:
        rule = self._rules.get(rule_id)
        if rule is None:
            return False
        rule.enabled = enabled
        rule.updated_at = datetime.now(timezone.utc)
        self._save()
        logger.info(f"{'Enabled' if enabled else 'Disabled'} rule: {rule.name}")
        return True

    # ── Queries ──

    def get_rules_by_purpose(self, purpose: str) -> list[Rule]:
        if purpose == "all":
            return self.get_all_rules()
        return [r.model_copy(deep=True) for r in self._rules.values() if r.purpose.value == purpose]

    def get_rules_by_role(self, role: str) -> list[Rule]:
        return [
            r.model_copy(deep=True)
            for r in self._rules.values()
            if r.enabled and (role in r.scope.user_roles or "*" in r.scope.user_roles)
        ]

    def find_by_name(self, name: str) -> Rule | None:
        for rule in self._rules.values():
            if rule.name == name:
                return rule.model_copy(deep=True)
        return None

    def get_stats(self) -> RuleStats:
        rules = self._rules.values()
        return RuleStats(
            total_rules=len(self._rules),
            enabled_rules=sum(1 for r in rules if r.enabled),
            total_triggers=sum(r.usage_stats.triggers for r in rules),
            total_overrides=sum(r.usage_stats.overrides for r in rules),
        )

    @staticmethod
    def suggestions_for(rule: Rule, matched_text: str) -> list[str]:
        return [s.format(match=matched_text) for s in PURPOSE_SUGGESTIONS.get(rule.purpose, [])]

    # ── Usage statistics ──

    def record_trigger(self, rule_id: str) -> None:
        rule = self._rules.get(rule_id)
        if rule is None:
            return
        rule.usage_stats.triggers += 1
        rule.usage_stats.last_triggered = datetime.now(timezone.utc)

    def record_override(self, rule_id: str) -> None:
        rule = self._rules.get(rule_id)
        if rule is None:
            return
        rule.usage_stats.overrides += 1
        self._save()

    def flush(self) -> None:
        """Persist usage statistics accumulated by record_trigger."""
        self._save()

    # ── Seeding / hooks ──

    def seed(self, rules: Iterable[RuleCreate]) -> int:
        """Create each rule whose name is not already present. Returns count created."""
        existing = {r.name for r in self._rules.values()}
        created = 0
        for rule_input in rules:
            if rule_input.name in existing:
                continue
            self.create_rule(rule_input)
            existing.add(rule_input.name)
            created += 1
        if created:
            logger.info(f"Seeded {created} built-in rules")
        return created

    def add_delete_listener(self, listener: Callable[[str], None]) -> None:
        self._delete_listeners.append(listener)

    # ── Internals ──

    def _parse(self, model: type, data: Any) -> Any:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise InvalidRuleError(str(e)) from e

    def _check_pattern(self, name: str, pattern: str, pattern_type: Any) -> None:
        error = check_pattern(pattern, pattern_type)
        if error is None:
            return
        if self.strict_patterns:
            raise InvalidRuleError(f'Rule "{name}" has an unusable pattern: {error}')
        logger.warning(f'Rule "{name}" has an unusable pattern and will be skipped: {error}')

    def _save(self) -> None:
        if self.repository is not None:
            self.repository.save(list(self._rules.values()))
