"""
Validation Pipeline — Main orchestrator for validating AI responses.

Full pipeline:
1. Empty text → single structural error, nothing else runs
2. Rule evaluation + response rewriting → validated text, change log
3. Heuristic scan of the validated text
4. Cross-reference check against the workspace file listing
5. Aggregate: valid iff stages 3 and 4 produced no errors
6. Disclosure footer appended when the rewriter changed anything

validate() never raises. Anything unexpected in stages 2–4 degrades the
call to the original text plus a failure banner, with is_valid False.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from veracity.audit.logger import AuditLogger
from veracity.config import settings
from veracity.core.errors import StageFailure
from veracity.core.rewriter import ResponseRewriter
from veracity.core.rule_engine import RuleEngine
from veracity.core.rule_store import RuleStore
from veracity.models.rule_models import Match
from veracity.models.validation_models import (
    FindingSeverity,
    FindingType,
    PipelineStats,
    RewriteResult,
    ValidationFinding,
    ValidationResult,
)
from veracity.scanners.cross_check import CrossReferenceValidator
from veracity.scanners.heuristic_scanner import HeuristicScanner, empty_content_finding
from veracity.workspace.probe import WorkspaceFileLister

logger = logging.getLogger("veracity.pipeline")


def validation_footer(change_log: list[str], now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    return (
        "\n\n---\n"
        f"**Veracity Passive Validation Applied** ({stamp})\n"
        f"*{', '.join(change_log)}*\n"
        "*This response has been automatically validated and revised for accuracy.*"
    )


def failure_banner(reason: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    return (
        "\n\n---\n"
        f"**⚠️ Veracity Validation Failed** ({stamp})\n"
        f"*Validation system encountered an error: {reason}*\n"
        "*Manual verification of this response is strongly advised.*\n"
        "*Please review the content carefully before proceeding.*"
    )


class ValidationPipeline:
    """
    Chains rule evaluation, rewriting, heuristic scanning and cross-checking.

    Stages are awaited strictly in order. Collaborators are injected so tests
    can substitute probes and cross-checkers.
    """

    def __init__(
        self,
        store: RuleStore,
        engine: RuleEngine,
        rewriter: ResponseRewriter,
        scanner: HeuristicScanner,
        cross_checker: CrossReferenceValidator,
        workspace: WorkspaceFileLister,
        audit_logger: AuditLogger | None = None,
        minimal_rule_names: list[str] | None = None,
        soft_timeout_ms: int | None = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.rewriter = rewriter
        self.scanner = scanner
        self.cross_checker = cross_checker
        self.workspace = workspace
        self.audit_logger = audit_logger
        self.minimal_rule_names = list(
            minimal_rule_names if minimal_rule_names is not None else settings.minimal_rule_names
        )
        self.soft_timeout_ms = (
            soft_timeout_ms if soft_timeout_ms is not None else settings.validation_soft_timeout_ms
        )
        self._stats = PipelineStats()

    async def validate(self, text: str, context_label: str = "AI Response") -> ValidationResult:
        """
        Run the full pipeline over ``text``.

        Args:
            text: Response text to validate.
            context_label: Free-form label passed to the cross-checker and audit log.

        Returns:
            ValidationResult. Never raises.
        """
        return await self._guarded(text, context_label, "full")

    async def validate_minimal(self, text: str) -> ValidationResult:
        """Allow-listed rules only; no scanning or cross-checking."""
        return await self._guarded(text, "minimal", "minimal")

    def get_stats(self) -> PipelineStats:
        return self._stats.model_copy()

    # ── Orchestration ──

    async def _guarded(self, text: str, context_label: str, mode: str) -> ValidationResult:
        start = time.monotonic()
        self._stats.total_responses += 1
        fallback = False

        try:
            if mode == "minimal":
                result = self._run_minimal(text)
            else:
                result = await self._run_full(text, context_label)
        except Exception as e:
            failure = e if isinstance(e, StageFailure) else StageFailure("validation", e)
            logger.error(f"Validation failed for {context_label}: {failure}", exc_info=True)
            result = self._fallback(text, failure)
            fallback = True

        elapsed = (time.monotonic() - start) * 1000
        result.duration_ms = elapsed
        self._record(result, elapsed, fallback)

        if elapsed > self.soft_timeout_ms:
            logger.warning(
                f"Validation of {context_label} took {elapsed:.0f}ms "
                f"(soft timeout {self.soft_timeout_ms}ms)"
            )

        if self.audit_logger is not None:
            self.audit_logger.record_validation(result, context_label, mode, fallback)

        return result

    async def _run_full(self, text: str, context_label: str) -> ValidationResult:
        if not text.strip():
            return _empty_result(text)

        # ── Stage 2: rules ──
        rules = self.store.get_enabled_rules()
        matches, rewrite = self._apply_rules(text, rules)
        validated_text = rewrite.validated_text
        rules_by_id = {r.id: r for r in rules}
        rule_suggestions = [
            s
            for m in matches
            for s in self.store.suggestions_for(rules_by_id[m.rule_id], m.matched_text)
        ]

        # ── Stage 3: heuristic scan ──
        try:
            scan = await self.scanner.scan(validated_text)
        except Exception as e:
            raise StageFailure("heuristic scan", e) from e

        # ── Stage 4: cross-reference ──
        try:
            known_files = await self.workspace.list_files()
            cross = await self.cross_checker.cross_check(validated_text, context_label, known_files)
        except Exception as e:
            raise StageFailure("cross-check", e) from e

        errors = scan.errors + cross.errors
        warnings = scan.warnings + cross.warnings
        # Purpose suggestions repeat across rules of the same purpose.
        suggestions = list(dict.fromkeys(rule_suggestions + scan.suggestions + cross.suggestions))

        if rewrite.applied_changes:
            validated_text += validation_footer(rewrite.change_log)

        logger.info(
            f"Validated {context_label}: {len(errors)} errors, {len(warnings)} warnings, "
            f"{len(rewrite.change_log)} changes"
        )

        return ValidationResult(
            is_valid=not errors,
            original_text=text,
            validated_text=validated_text,
            applied_changes=rewrite.applied_changes,
            change_log=rewrite.change_log,
            errors=errors,
            warnings=warnings,
            suggestions=suggestions,
        )

    def _run_minimal(self, text: str) -> ValidationResult:
        if not text.strip():
            return _empty_result(text)

        allowed = set(self.minimal_rule_names)
        rules = [r for r in self.store.get_enabled_rules() if r.name in allowed]
        _, rewrite = self._apply_rules(text, rules)

        validated_text = rewrite.validated_text
        if rewrite.applied_changes:
            validated_text += validation_footer(rewrite.change_log)

        return ValidationResult(
            is_valid=True,
            original_text=text,
            validated_text=validated_text,
            applied_changes=rewrite.applied_changes,
            change_log=rewrite.change_log,
        )

    def _apply_rules(self, text: str, rules: list) -> tuple[list[Match], RewriteResult]:
        try:
            matches = self.engine.evaluate_content(text, rules)
            return matches, self.rewriter.apply_rules(text, rules)
        except Exception as e:
            raise StageFailure("rules", e) from e

    def _fallback(self, text: str, failure: StageFailure) -> ValidationResult:
        reason = str(failure.cause)
        return ValidationResult(
            is_valid=False,
            original_text=text,
            validated_text=text + failure_banner(reason),
            errors=[
                ValidationFinding(
                    type=FindingType.SAFETY,
                    message=f"Validation failed: {reason}",
                    severity=FindingSeverity.ERROR,
                    category="validation_error",
                    line=1,
                )
            ],
        )

    def _record(self, result: ValidationResult, elapsed_ms: float, fallback: bool) -> None:
        if fallback:
            return
        stats = self._stats
        stats.validated_responses += 1
        if result.applied_changes:
            stats.applied_changes += 1
        total = stats.average_processing_time_ms * (stats.validated_responses - 1) + elapsed_ms
        stats.average_processing_time_ms = total / stats.validated_responses
        stats.last_validation = datetime.now(timezone.utc)


def _empty_result(text: str) -> ValidationResult:
    return ValidationResult(
        is_valid=False,
        original_text=text,
        validated_text=text,
        errors=[empty_content_finding()],
    )
