"""
Claim Cross-Checker — the default cross-reference validator.

Compares what a response claims against the known workspace file listing and
a set of phrase lists (hallucination claims, mock data, security and
performance anti-patterns). Any object exposing the same ``cross_check``
coroutine can replace it in the pipeline.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from veracity.models.validation_models import (
    CrossCheckResult,
    FindingSeverity,
    FindingType,
    ValidationFinding,
)

logger = logging.getLogger("veracity.crosscheck")

_I = re.IGNORECASE

CLAIM_PATTERNS = (
    re.compile(r"(?:I have|I've|I just|I created|I implemented|I added|I fixed)\s+[^\n!?]+", _I),
    re.compile(r"(?:created|added|implemented)\s+[^\n!?]+", _I),
    re.compile(r"(?:in|at)\s+[\w/.-]+\.(?:ts|js|py|json|md)\b", _I),
)
CLAIMED_FILE = re.compile(r"[\w/.-]+\.(?:ts|js|py|json|md|txt|yml|yaml)\b")

HALLUCINATION_CLAIMS = (
    re.compile(
        r"\b(?:I have|I've|I just|I created|I implemented|I added|I fixed)\s+(?:the|a|an)\s+"
        r"(?:feature|function|class|method|file|script|tool)\b",
        _I,
    ),
    re.compile(r"\b(?:implemented|created|added|fixed|built|developed)\s+(?:successfully|properly|correctly|fully)\b", _I),
    re.compile(r"\b(?:successfully|properly|correctly|fully)\s+(?:implemented|created|added|fixed|built|developed)\b", _I),
    re.compile(r"\b(?:created|added|implemented)\s+(?:file|script|class|module)\s+(?:at|in)\s+[\w/.-]+", _I),
    re.compile(r"\b(?:tested|verified|validated|confirmed)\s+(?:and|that|it)\s+(?:works|functions|operates)\b", _I),
    re.compile(r"\b(?:improved|enhanced|optimized|boosted)\s+(?:performance|speed|efficiency)\b", _I),
    re.compile(r"\b(?:improved|enhanced|better)\s+(?:user\s+)?(?:experience|interface|ux|ui)\b", _I),
)

MOCK_DATA_PATTERNS = (
    re.compile(r"\bmock\w*\s+(?:data|api|response)s?\b", _I),
    re.compile(r"\bfake\s+(?:data|api|response)s?\b", _I),
    re.compile(r"\bsimulate[sd]?\s+(?:the\s+)?(?:api|response)s?\b", _I),
    re.compile(r"\bdummy\s+data\b", _I),
)

SECURITY_ANTI_PATTERNS = (
    "SQL injection", "XSS", "CSRF", "insecure random", "weak crypto",
    "hardcoded credentials", "debug mode in production",
)

PERFORMANCE_ANTI_PATTERNS = (
    "O(n²)", "O(n³)", "nested loops", "recursion without base case",
    "memory leak", "infinite loop", "blocking operation",
)


class CrossReferenceValidator(Protocol):
    async def cross_check(
        self, text: str, context_label: str, known_files: list[str]
    ) -> CrossCheckResult: ...


def _line_of(text: str, needle: str) -> int | None:
    for i, line in enumerate(text.split("\n"), start=1):
        if needle in line:
            return i
    return None


def _is_known(file_ref: str, known_files: list[str]) -> bool:
    ref = file_ref.removeprefix("./")
    return any(f == ref or f.endswith("/" + ref) for f in known_files)


class ClaimCrossChecker:
    """Phrase-list and file-listing cross-check of AI claims."""

    async def cross_check(
        self, text: str, context_label: str, known_files: list[str]
    ) -> CrossCheckResult:
        result = CrossCheckResult()

        self._check_claimed_files(text, known_files, result)
        self._check_phrases(text, result)

        result.is_valid = not result.errors
        logger.debug(
            f"Cross-check for {context_label}: {len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result

    def _check_claimed_files(self, text: str, known_files: list[str], result: CrossCheckResult) -> None:
        reported: set[str] = set()
        for pattern in CLAIM_PATTERNS:
            for claim in pattern.findall(text):
                for file_ref in CLAIMED_FILE.findall(claim):
                    if file_ref in reported or _is_known(file_ref, known_files):
                        continue
                    reported.add(file_ref)
                    result.errors.append(
                        ValidationFinding(
                            type=FindingType.HALLUCINATION,
                            message=f"File referenced but doesn't exist: {file_ref}",
                            severity=FindingSeverity.ERROR,
                            category="missing_file",
                            line=_line_of(text, file_ref),
                        )
                    )
                    result.suggestions.append(f"Verify that {file_ref} exists in the workspace")

    def _check_phrases(self, text: str, result: CrossCheckResult) -> None:
        for pattern in HALLUCINATION_CLAIMS:
            for m in pattern.finditer(text):
                result.errors.append(
                    ValidationFinding(
                        type=FindingType.HALLUCINATION,
                        message=f'Potential hallucination detected: "{m.group(0).strip()}" - Verify this claim',
                        severity=FindingSeverity.ERROR,
                        category="ai_hallucination",
                        line=_line_of(text, m.group(0)),
                    )
                )

        for pattern in MOCK_DATA_PATTERNS:
            m = pattern.search(text)
            if m:
                result.errors.append(
                    ValidationFinding(
                        type=FindingType.MOCK_DATA,
                        message=f'Mock/fake data pattern detected: "{m.group(0)}"',
                        severity=FindingSeverity.ERROR,
                        category="mock_data",
                        line=_line_of(text, m.group(0)),
                    )
                )
                result.suggestions.append("Use real data and APIs instead of mock implementations")

        lowered = text.lower()
        for phrase in SECURITY_ANTI_PATTERNS:
            if phrase.lower() in lowered:
                result.errors.append(
                    ValidationFinding(
                        type=FindingType.SECURITY,
                        message=f'Security vulnerability detected: "{phrase}"',
                        severity=FindingSeverity.ERROR,
                        category="security_issue",
                    )
                )

        for phrase in PERFORMANCE_ANTI_PATTERNS:
            if phrase.lower() in lowered:
                result.warnings.append(
                    ValidationFinding(
                        type=FindingType.PERFORMANCE,
                        message=f'Performance concern detected: "{phrase}"',
                        severity=FindingSeverity.WARNING,
                        category="performance_issue",
                    )
                )

        for i, line in enumerate(text.split("\n"), start=1):
            if "TODO" in line or "FIXME" in line:
                result.warnings.append(
                    ValidationFinding(
                        type=FindingType.QUALITY,
                        message=f"Placeholder content detected: {line.strip()}",
                        severity=FindingSeverity.WARNING,
                        category="placeholder_content",
                        line=i,
                    )
                )
