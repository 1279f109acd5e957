"""
Validation Data Models — findings, stage reports, and the aggregated result.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class FindingType(str, Enum):
    SAFETY = "safety"
    SYNTAX = "syntax"
    HALLUCINATION = "hallucination"
    MOCK_DATA = "mock_data"
    SECURITY = "security"
    PERFORMANCE = "performance"
    QUALITY = "quality"


class FindingSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ClaimType(str, Enum):
    CREATION = "CREATION"
    EXISTENCE = "EXISTENCE"
    MODIFICATION = "MODIFICATION"
    CONTENT = "CONTENT"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidationFinding(BaseModel):
    """A single error or warning produced by a validation stage."""

    type: FindingType
    message: str
    severity: FindingSeverity
    category: str = Field(..., description="Free-form slug, e.g. 'empty_content'")
    line: int | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


class ScanReport(BaseModel):
    """Output of a heuristic scan or a tech-debt evaluation."""

    errors: list[ValidationFinding] = Field(default_factory=list)
    warnings: list[ValidationFinding] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, other: ScanReport) -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.suggestions.extend(other.suggestions)


class CrossCheckResult(BaseModel):
    """Returned by a cross-reference validator."""

    is_valid: bool = True
    errors: list[ValidationFinding] = Field(default_factory=list)
    warnings: list[ValidationFinding] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class FileClaim(BaseModel):
    """A claim about a named path extracted from text."""

    type: ClaimType
    file_path: str
    line: int
    context: str = ""


class RewriteResult(BaseModel):
    validated_text: str
    applied_changes: bool = False
    change_log: list[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Aggregated outcome of one pipeline run."""

    is_valid: bool
    original_text: str = ""
    validated_text: str = ""
    applied_changes: bool = False
    change_log: list[str] = Field(default_factory=list)
    errors: list[ValidationFinding] = Field(default_factory=list)
    warnings: list[ValidationFinding] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)
    duration_ms: float = 0.0


class PipelineStats(BaseModel):
    total_responses: int = 0
    validated_responses: int = 0
    applied_changes: int = 0
    average_processing_time_ms: float = 0.0
    last_validation: datetime | None = None


class AuditEntry(BaseModel):
    """One line of the JSON-lines audit trail."""

    context_label: str
    mode: str = Field(..., description="'full' or 'minimal'")
    is_valid: bool
    error_count: int = 0
    warning_count: int = 0
    change_count: int = 0
    fallback: bool = False
    duration_ms: float = 0.0


class AuditSummary(BaseModel):
    """Totals over the whole audit trail."""

    runs: int = 0
    invalid: int = 0
    fallbacks: int = 0
    errors: int = 0
    warnings: int = 0
    changes: int = 0
