"""
Test fixtures shared across all Veracity tests.
"""

import pytest

from veracity.alerts.scheduler import AlertScheduler
from veracity.audit.logger import AuditLogger
from veracity.core.default_rules import DEFAULT_RULES
from veracity.core.rewriter import ResponseRewriter
from veracity.core.rule_engine import RuleEngine
from veracity.core.rule_store import RuleStore
from veracity.engine.pipeline import ValidationPipeline
from veracity.scanners.cross_check import ClaimCrossChecker
from veracity.scanners.heuristic_scanner import HeuristicScanner
from veracity.workspace.probe import FileStat


class FakeClock:
    """Settable wall clock in epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    def __init__(self) -> None:
        self.notified: list[tuple[str, tuple[str, ...]]] = []
        self.logged: list[str] = []
        self.rendered: list[str] = []

    def notify(self, message, actions=()):
        self.notified.append((message, tuple(actions)))

    def log(self, message):
        self.logged.append(message)

    def render(self, message):
        self.rendered.append(message)

    @property
    def total(self) -> int:
        return len(self.notified) + len(self.logged) + len(self.rendered)


class FakeWorkspace:
    """In-memory FileProbe + WorkspaceFileLister. ``files`` maps path -> mtime."""

    def __init__(self, files: dict[str, float] | None = None) -> None:
        self.files = dict(files or {})
        self.exists_calls: list[str] = []
        self.stat_calls: list[str] = []
        self.list_calls = 0

    async def exists(self, path: str) -> bool:
        self.exists_calls.append(path)
        return path in self.files

    async def stat(self, path: str) -> FileStat:
        self.stat_calls.append(path)
        return FileStat(mtime=self.files[path])

    async def list_files(self) -> list[str]:
        self.list_calls += 1
        return list(self.files)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def workspace():
    return FakeWorkspace()


@pytest.fixture
def store():
    """Empty in-memory store."""
    return RuleStore(strict_patterns=False)


@pytest.fixture
def seeded_store():
    """In-memory store holding the built-in rule set."""
    s = RuleStore(strict_patterns=False)
    s.seed(DEFAULT_RULES)
    return s


@pytest.fixture
def scheduler(sink, clock):
    return AlertScheduler(sink=sink, clock=clock)


@pytest.fixture
def pipeline(seeded_store, scheduler, workspace, clock, tmp_path):
    return ValidationPipeline(
        store=seeded_store,
        engine=RuleEngine(seeded_store, scheduler=scheduler),
        rewriter=ResponseRewriter(),
        scanner=HeuristicScanner(probe=workspace, clock=clock),
        cross_checker=ClaimCrossChecker(),
        workspace=workspace,
        audit_logger=AuditLogger(str(tmp_path / "audit.jsonl")),
    )


@pytest.fixture
def rule_input():
    return {
        "name": "No Placeholder Secrets",
        "description": "Flags hardcoded API keys",
        "purpose": "security",
        "severity": "error",
        "pattern_type": "regex",
        "pattern": r"api[_-]?key\s*=",
        "message": "Hardcoded API key",
    }
