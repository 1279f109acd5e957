"""
Rule Data Models — Rules, alerting policies, matches, and rule statistics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class RulePurpose(str, Enum):
    SECURITY = "security"
    QUALITY = "quality"
    COMPLIANCE = "compliance"
    WORKFLOW = "workflow"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class PatternType(str, Enum):
    REGEX = "regex"
    KEYWORD = "keyword"
    SEMANTIC = "semantic"


class ActionKind(str, Enum):
    STRIP = "strip"
    REWRITE_VAGUE = "rewrite-vague"
    ANNOTATE = "annotate-only"
    CUSTOM = "custom"


class WhenToAlert(str, Enum):
    IMMEDIATE = "immediate"
    DELAYED = "delayed"
    BATCH = "batch"
    MANUAL = "manual"


class AlertChannel(str, Enum):
    NOTIFICATION = "notification"
    TOAST = "toast"
    STATUSBAR = "statusbar"
    LOG = "log"
    DASHBOARD = "dashboard"
    ALL = "all"


class AlertFrequency(str, Enum):
    ALWAYS = "always"
    ONCE = "once"
    THROTTLED = "throttled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertingPolicy(BaseModel):
    """When, how and how often a rule's matches surface as alerts."""

    when_to_alert: WhenToAlert = WhenToAlert.IMMEDIATE
    delay_seconds: float = Field(default=30, ge=0)
    batch_size: int = Field(default=5, ge=1)
    batch_timeout_minutes: float = Field(default=5, ge=0)
    how_to_alert: AlertChannel = AlertChannel.NOTIFICATION
    alert_frequency: AlertFrequency = AlertFrequency.ALWAYS
    throttle_minutes: float | None = Field(default=None, ge=0)
    suppress_after_triggers: int | None = Field(default=None, ge=1)
    suppress_duration_minutes: float = Field(default=60, ge=0)


class RuleScope(BaseModel):
    """Where a rule applies. A list containing '*' matches everything."""

    file_types: list[str] = Field(default_factory=lambda: ["*"])
    project_types: list[str] = Field(default_factory=lambda: ["*"])
    user_roles: list[str] = Field(default_factory=lambda: ["*"])


class UsageStats(BaseModel):
    triggers: int = Field(default=0, ge=0)
    overrides: int = Field(default=0, ge=0)
    last_triggered: datetime | None = None


class OverridePolicy(BaseModel):
    allowed: bool = True
    requires_justification: bool = False


class RuleAction(BaseModel):
    """
    What the response rewriter does when the rule matches.

    ``category`` keys the fixed note for annotate-only rules; ``handler_id``
    names a registered handler for custom rules.
    """

    kind: ActionKind
    category: str | None = None
    handler_id: str | None = None


class RuleCreate(BaseModel):
    """Input accepted by RuleStore.create_rule."""

    name: str = Field(..., min_length=1)
    description: str = ""
    purpose: RulePurpose
    severity: Severity
    pattern_type: PatternType
    pattern: str = Field(..., min_length=1)
    message: str = ""
    response: str | None = Field(
        default=None, description="Alert text used when the rule triggers"
    )
    action: RuleAction | None = None
    enabled: bool = True
    scope: RuleScope = Field(default_factory=RuleScope)
    alerting: AlertingPolicy | None = None
    override: OverridePolicy = Field(default_factory=OverridePolicy)
    created_by: str = "user"


class RuleUpdate(BaseModel):
    """Partial update; only fields explicitly set are applied."""

    name: str | None = None
    description: str | None = None
    purpose: RulePurpose | None = None
    severity: Severity | None = None
    pattern_type: PatternType | None = None
    pattern: str | None = None
    message: str | None = None
    response: str | None = None
    action: RuleAction | None = None
    enabled: bool | None = None
    scope: RuleScope | None = None
    alerting: AlertingPolicy | None = None
    override: OverridePolicy | None = None


class Rule(RuleCreate):
    """A stored rule. ``id`` is assigned once at creation and never changes."""

    id: str
    usage_stats: UsageStats = Field(default_factory=UsageStats)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Match(BaseModel):
    """One rule firing against a piece of content."""

    rule_id: str
    rule_name: str
    matched_text: str
    line: int | None = Field(default=None, description="1-based line, best effort")
    confidence: float | None = Field(
        default=None, description="Reserved; no rule computes a score yet"
    )


class RuleStats(BaseModel):
    total_rules: int = 0
    enabled_rules: int = 0
    total_triggers: int = 0
    total_overrides: int = 0
