"""
Built-in Rules — the rule set seeded into an empty store.

Each entry is plain RuleCreate input. Behaviour on match is carried by the
explicit ``action`` field; display names are for humans only.
"""

from __future__ import annotations

from veracity.models.rule_models import (
    ActionKind,
    AlertChannel,
    AlertFrequency,
    AlertingPolicy,
    PatternType,
    RuleAction,
    RuleCreate,
    RulePurpose,
    Severity,
    WhenToAlert,
)

STRIP = RuleAction(kind=ActionKind.STRIP)
REWRITE_VAGUE = RuleAction(kind=ActionKind.REWRITE_VAGUE)


def _annotate(category: str) -> RuleAction:
    return RuleAction(kind=ActionKind.ANNOTATE, category=category)


def _regex(
    name: str,
    pattern: str,
    purpose: RulePurpose,
    severity: Severity,
    *,
    message: str = "",
    response: str | None = None,
    action: RuleAction | None = None,
    alerting: AlertingPolicy | None = None,
) -> RuleCreate:
    return RuleCreate(
        name=name,
        pattern=pattern,
        pattern_type=PatternType.REGEX,
        purpose=purpose,
        severity=severity,
        message=message,
        response=response,
        action=action,
        alerting=alerting,
        created_by="system",
    )


FILESYSTEM_RULES: list[RuleCreate] = [
    _regex(
        "Filesystem Hallucination Detection",
        r"\b(?:file|directory|folder|path)\s+(?:exists|is\s+present|can\s+be\s+found|is\s+available)\b",
        RulePurpose.QUALITY,
        Severity.ERROR,
        message="Potential hallucination: File existence claim detected. Verify file actually exists.",
    ),
    _regex(
        "File Content Claim Validation",
        r"\b(?:content|text|data)\s+(?:in|of|from)\s+(?:file|document)\b",
        RulePurpose.QUALITY,
        Severity.ERROR,
        message="Potential hallucination: File content claim detected. Verify content actually exists in file.",
    ),
    _regex(
        "File Modification Time Claim",
        r"\b(?:modified|updated|changed)\s+(?:on|at|when)\b",
        RulePurpose.QUALITY,
        Severity.ERROR,
        message="Potential hallucination: File modification time claim detected. Verify modification timestamp.",
    ),
    _regex(
        "Directory Structure Claim",
        r"\b(?:directory|folder)\s+(?:structure|layout|organization)\b",
        RulePurpose.QUALITY,
        Severity.ERROR,
        message="Potential hallucination: Directory structure claim detected. Verify directory structure.",
    ),
    _regex(
        "File Size Claim",
        r"\b(?:file|document)\s+(?:size|length|bytes)\b",
        RulePurpose.QUALITY,
        Severity.ERROR,
        message="Potential hallucination: File size claim detected. Verify actual file size.",
    ),
    _regex(
        "Minimal Hallucination Detection",
        r"\b(?:I\s+can\s+see|there\s+is|I\s+found|I\s+located|the\s+file\s+contains|I\s+can\s+see\s+in\s+the\s+file)\b",
        RulePurpose.QUALITY,
        Severity.WARNING,
        message="Potential hallucination: AI making claims about file content. Verify these claims.",
    ),
]

CLAIM_RULES: list[RuleCreate] = [
    _regex(
        "Version Consistency Check",
        r"\b(?:version|v\d+\.\d+\.\d+|semver)\b",
        RulePurpose.WORKFLOW,
        Severity.WARNING,
        response="Version consistency check triggered. This may be a temporary mismatch during updates.",
        action=_annotate("version_claim"),
        alerting=AlertingPolicy(
            when_to_alert=WhenToAlert.DELAYED,
            delay_seconds=30,
            how_to_alert=AlertChannel.NOTIFICATION,
            alert_frequency=AlertFrequency.THROTTLED,
            throttle_minutes=5,
            suppress_after_triggers=10,
            suppress_duration_minutes=60,
        ),
    ),
    _regex(
        "Implementation Verification",
        r"\b(?:I\s+implemented|I\s+created|I\s+built|I\s+developed)\b",
        RulePurpose.QUALITY,
        Severity.WARNING,
        action=_annotate("implementation_claim"),
    ),
    _regex(
        "Task Completion Claim",
        r"\b(?:completed|finished|done|implemented|resolved)\b",
        RulePurpose.QUALITY,
        Severity.WARNING,
        action=_annotate("completion_claim"),
    ),
    _regex(
        "Audit Results Claim",
        r"\b(?:audit|review|analysis|assessment)\s+(?:shows|indicates|reveals)\b",
        RulePurpose.COMPLIANCE,
        Severity.WARNING,
        action=_annotate("audit_claim"),
    ),
    _regex(
        "Compilation Status Claim",
        r"\b(?:compiles|builds|runs|executes)\s+(?:successfully|without\s+errors)\b",
        RulePurpose.QUALITY,
        Severity.WARNING,
        action=_annotate("compilation_claim"),
    ),
    _regex(
        "Test Results Claim",
        r"\b(?:tests\s+pass|test\s+results|coverage|tested)\b",
        RulePurpose.QUALITY,
        Severity.WARNING,
        action=_annotate("test_claim"),
    ),
    _regex(
        "Hallucination Admission",
        r"\b(?:I\s+don\s*'t\s+know|I\s+can\s*'t\s+see|I\s+don\s*'t\s+have\s+access)\b",
        RulePurpose.QUALITY,
        Severity.INFO,
        action=_annotate("transparency"),
    ),
    _regex(
        "Vague Offer Detection",
        r"\b(?:I\s+can\s+help|I\s+can\s+assist|I\s+can\s+guide)\b",
        RulePurpose.QUALITY,
        Severity.INFO,
        action=REWRITE_VAGUE,
    ),
    _regex(
        "Absolute Statement Detection",
        r"\b(?:always|never|every|all|none|impossible|guaranteed)\b",
        RulePurpose.QUALITY,
        Severity.WARNING,
        action=_annotate("absolute_statement"),
    ),
    _regex(
        "Performance Claim Detection",
        r"\b(?:fast|slow|efficient|optimized|performance|speed)\b",
        RulePurpose.QUALITY,
        Severity.WARNING,
        action=_annotate("performance_claim"),
    ),
    _regex(
        "No Repetitive Confirmation or Stalling",
        r"(let me know if you want to review|otherwise, I will proceed as planned|waiting for confirmation"
        r"|if you have any new requests|just let me know).*?[.!?]",
        RulePurpose.WORKFLOW,
        Severity.WARNING,
        message="Detected repetitive confirmation or stalling. Proceed with the work unless explicitly told to wait.",
        action=STRIP,
    ),
]

WORKFLOW_RULES: list[RuleCreate] = [
    _regex(
        "Auto Version Management",
        r"\b(?:version|release|update|bump)\b",
        RulePurpose.WORKFLOW,
        Severity.INFO,
        response="Version management activity detected. This is normal during updates.",
        action=_annotate("version_management"),
        alerting=AlertingPolicy(
            when_to_alert=WhenToAlert.DELAYED,
            delay_seconds=15,
            how_to_alert=AlertChannel.LOG,
            alert_frequency=AlertFrequency.THROTTLED,
            throttle_minutes=3,
            suppress_after_triggers=5,
            suppress_duration_minutes=30,
        ),
    ),
    _regex("AI Task Execution", r"\b(?:I\s+will|I\s+can|I\s+should|let\s+me)\b",
           RulePurpose.WORKFLOW, Severity.INFO, action=_annotate("task_execution")),
    _regex("GitHub Workflow Management", r"\b(?:branch|merge|commit|push|pull|issue|pr)\b",
           RulePurpose.WORKFLOW, Severity.INFO, action=_annotate("github_workflow")),
    _regex("Product Discovery Protocol", r"\b(?:plan|strategy|roadmap|milestone|goal)\b",
           RulePurpose.WORKFLOW, Severity.INFO, action=_annotate("product_discovery")),
    _regex("Beginner Guidance", r"\b(?:how\s+to|what\s+is|explain|guide|tutorial)\b",
           RulePurpose.WORKFLOW, Severity.INFO, action=_annotate("beginner_guidance")),
    _regex("Error Recovery Assistance", r"\b(?:error|exception|fail|crash|bug)\b",
           RulePurpose.WORKFLOW, Severity.WARNING, action=_annotate("error_recovery")),
    _regex("Best Practice Suggestions", r"\b(?:best\s+practice|recommendation|suggestion|tip)\b",
           RulePurpose.WORKFLOW, Severity.INFO, action=_annotate("best_practice")),
    _regex("Dependency Management", r"\b(?:dependency|package|import|require|install)\b",
           RulePurpose.SECURITY, Severity.INFO, action=_annotate("dependency_management")),
    _regex("Testing Guidance", r"\b(?:test|spec|coverage|assert|mock)\b",
           RulePurpose.QUALITY, Severity.INFO, action=_annotate("testing_guidance")),
    _regex("Documentation Assistance", r"\b(?:document|comment|readme|api|guide)\b",
           RulePurpose.WORKFLOW, Severity.INFO, action=_annotate("documentation")),
]

DEFAULT_RULES: list[RuleCreate] = FILESYSTEM_RULES + CLAIM_RULES + WORKFLOW_RULES
