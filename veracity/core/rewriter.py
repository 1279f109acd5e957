"""
Response Rewriter — Applies rule actions to a response text.

Each enabled rule is re-matched against the current text, so edits made by
earlier rules are visible to later ones. Dispatch is on the rule's explicit
action, never on its display name. One rule failing is recorded in the change
log and the remaining rules still run.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from veracity.core import pattern_matcher
from veracity.core.errors import RuleApplicationError
from veracity.models.rule_models import ActionKind, PatternType, Rule
from veracity.models.validation_models import RewriteResult

logger = logging.getLogger("veracity.rules.rewriter")

# (text, rule) -> (new_text, change-log note)
CustomHandler = Callable[[str, Rule], tuple[str, str]]

STRIP_NOTE = "Removed repetitive confirmation/stalling language"
REWRITE_VAGUE_NOTE = "Vague offers made more specific"

ANNOTATION_NOTES: dict[str, str] = {
    "version_claim": "Version information detected - ensure consistency across files",
    "implementation_claim": "Implementation claims detected - verify actual implementation",
    "completion_claim": "Task completion claims detected - verify actual completion",
    "audit_claim": "Audit result claims detected - ensure evidence is available",
    "compilation_claim": "Compilation status claims detected - verify actual compilation",
    "test_claim": "Test result claims detected - verify actual test execution",
    "transparency": "Transparency detected - good practice acknowledged",
    "absolute_statement": "Absolute statements detected - consider adding qualifiers",
    "performance_claim": "Performance claims detected - ensure metrics are available",
    "version_management": "Version management detected - consider automated versioning",
    "task_execution": "AI task execution claims detected - verify actual execution",
    "github_workflow": "GitHub workflow detected - consider automated workflows",
    "product_discovery": "Product planning detected - consider structured discovery process",
    "beginner_guidance": "Beginner guidance detected - good practice acknowledged",
    "error_recovery": "Error handling detected - ensure comprehensive error recovery",
    "best_practice": "Best practice suggestions detected - good practice acknowledged",
    "dependency_management": "Dependency management detected - ensure security review",
    "testing_guidance": "Testing guidance detected - ensure comprehensive test coverage",
    "documentation": "Documentation assistance detected - good practice acknowledged",
}

_VAGUE_OFFER = re.compile(r"I\s+can\s+(?:help|assist|guide)", re.IGNORECASE)
_SPECIFIC_OFFER = "I will provide specific guidance on"


def generic_note(rule: Rule) -> str:
    return f'Rule "{rule.name}" triggered - review for accuracy'


class ResponseRewriter:
    """Mutates or annotates text according to each matching rule's action."""

    def __init__(self, handlers: dict[str, CustomHandler] | None = None) -> None:
        self.handlers: dict[str, CustomHandler] = dict(handlers or {})

    def register_handler(self, handler_id: str, handler: CustomHandler) -> None:
        self.handlers[handler_id] = handler

    def apply_rules(self, text: str, enabled_rules: list[Rule]) -> RewriteResult:
        validated = text
        applied_changes = False
        change_log: list[str] = []

        for rule in enabled_rules:
            try:
                outcome = pattern_matcher.match(rule.pattern, rule.pattern_type, validated)
                if outcome.error:
                    logger.warning(f"Skipping rule '{rule.name}': {outcome.error}")
                    continue
                if not outcome.matched:
                    continue

                applied_changes = True
                validated, note = self._apply(rule, validated)
                change_log.append(note)
            except Exception as e:
                failure = RuleApplicationError(rule.name, e)
                logger.warning(str(failure), exc_info=True)
                change_log.append(str(failure))

        return RewriteResult(
            validated_text=validated,
            applied_changes=applied_changes,
            change_log=change_log,
        )

    def _apply(self, rule: Rule, text: str) -> tuple[str, str]:
        action = rule.action
        if action is None:
            return text, generic_note(rule)

        if action.kind == ActionKind.STRIP:
            return pattern_matcher.strip_matches(rule.pattern, rule.pattern_type, text), STRIP_NOTE

        if action.kind == ActionKind.REWRITE_VAGUE:
            return _make_offers_specific(rule, text), REWRITE_VAGUE_NOTE

        if action.kind == ActionKind.ANNOTATE:
            return text, ANNOTATION_NOTES.get(action.category or "", generic_note(rule))

        if action.kind == ActionKind.CUSTOM:
            handler = self.handlers.get(action.handler_id or "")
            if handler is None:
                return text, generic_note(rule)
            return handler(text, rule)

        return text, generic_note(rule)


def _make_offers_specific(rule: Rule, text: str) -> str:
    if rule.pattern_type != PatternType.REGEX:
        return _VAGUE_OFFER.sub(_SPECIFIC_OFFER, text)
    regex = pattern_matcher.compile_pattern(rule.pattern)
    return regex.sub(lambda m: _VAGUE_OFFER.sub(_SPECIFIC_OFFER, m.group(0)), text)
