"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from veracity.alerts.scheduler import AlertScheduler
from veracity.alerts.sinks import LoggingAlertSink
from veracity.audit.logger import AuditLogger
from veracity.config import settings
from veracity.core.default_rules import DEFAULT_RULES
from veracity.core.rewriter import ResponseRewriter
from veracity.core.rule_engine import RuleEngine
from veracity.core.rule_store import RuleStore
from veracity.engine.pipeline import ValidationPipeline
from veracity.scanners.cross_check import ClaimCrossChecker
from veracity.scanners.heuristic_scanner import HeuristicScanner
from veracity.storage.rule_repository import RuleRepository
from veracity.workspace.probe import LocalWorkspace


@lru_cache
def get_alert_sink() -> LoggingAlertSink:
    return LoggingAlertSink()


@lru_cache
def get_alert_scheduler() -> AlertScheduler:
    return AlertScheduler(sink=get_alert_sink())


@lru_cache
def get_rule_store() -> RuleStore:
    """Shared rule store, loaded from disk and seeded with the built-in rules."""
    store = RuleStore(repository=RuleRepository())
    if settings.seed_default_rules:
        store.seed(DEFAULT_RULES)
    store.add_delete_listener(get_alert_scheduler().forget)
    return store


@lru_cache
def get_rule_engine() -> RuleEngine:
    return RuleEngine(get_rule_store(), scheduler=get_alert_scheduler())


@lru_cache
def get_workspace() -> LocalWorkspace:
    return LocalWorkspace()


@lru_cache
def get_audit_logger() -> AuditLogger:
    """Shared audit logger singleton."""
    return AuditLogger()


@lru_cache
def get_pipeline() -> ValidationPipeline:
    """Shared validation pipeline singleton."""
    workspace = get_workspace()
    return ValidationPipeline(
        store=get_rule_store(),
        engine=get_rule_engine(),
        rewriter=ResponseRewriter(),
        scanner=HeuristicScanner(probe=workspace),
        cross_checker=ClaimCrossChecker(),
        workspace=workspace,
        audit_logger=get_audit_logger(),
    )
