"""
Error taxonomy for the rule engine and validation pipeline.

Only InvalidRuleError (and RuleNotFoundError at the API edge) is ever raised
to callers. The others are raised and caught internally so that a single
validate() call always returns a well-formed result.
"""

from __future__ import annotations


class VeracityError(Exception):
    """Base class for all Veracity errors."""


class InvalidRuleError(VeracityError):
    """Rule input carries an unrecognised enum value or an unusable pattern."""


class RuleNotFoundError(VeracityError):
    """No rule exists with the requested id."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Unknown rule: {rule_id}")
        self.rule_id = rule_id


class PatternCompileError(VeracityError):
    """A rule pattern could not be compiled. The rule is skipped and logged."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class RuleApplicationError(VeracityError):
    """Applying one rule's rewrite action failed."""

    def __init__(self, rule_name: str, cause: Exception) -> None:
        super().__init__(f'Error applying rule "{rule_name}": {cause}')
        self.rule_name = rule_name
        self.cause = cause


class StageFailure(VeracityError):
    """A whole pipeline stage raised. Caught only at the pipeline's top level."""

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(f"{stage} stage failed: {cause}")
        self.stage = stage
        self.cause = cause
