"""
Heuristic Scanner — rule-independent checks for fabricated claims.

Stages, in order:
1. Structural: empty text is a single error and nothing else runs
2. Chat shape: warn when too few lines look like conversation
3. Hallucination phrase families, one warning per family per line
4. Fenced code: debug/TODO warnings, security errors
5. File references checked against the workspace probe
6. File claims (creation, existence, modification, content) checked the same way

Probe calls are awaited one file at a time. A failing probe call becomes a
warning for that file; it never aborts the scan.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from veracity.config import settings
from veracity.models.validation_models import (
    ClaimType,
    FileClaim,
    FindingSeverity,
    FindingType,
    ScanReport,
    ValidationFinding,
)
from veracity.scanners.patterns import (
    CHAT_SHAPE_MARKERS,
    CLAIM_SUGGESTIONS,
    CODE_FENCE,
    CODE_SMELLS,
    FILE_CLAIMS,
    FILE_REFERENCES,
    HALLUCINATION_FAMILIES,
    SUSPICIOUS_FILESYSTEM_FAMILIES,
)
from veracity.workspace.probe import FileProbe

logger = logging.getLogger("veracity.scanner")


def empty_content_finding() -> ValidationFinding:
    return ValidationFinding(
        type=FindingType.HALLUCINATION,
        message="Document is empty or contains only whitespace",
        severity=FindingSeverity.ERROR,
        category="empty_content",
        line=1,
    )


def detect_chat_shape(lines: list[str], threshold: float) -> tuple[bool, list[str]]:
    """Return (is_chat, marker kinds seen)."""
    indicators = 0
    seen: list[str] = []
    for line in lines:
        trimmed = line.strip()
        for kind, pattern in CHAT_SHAPE_MARKERS.items():
            if pattern.search(trimmed) if kind == "timestamp" else pattern.match(trimmed):
                indicators += 1
                if kind not in seen:
                    seen.append(kind)
    is_chat = indicators > 0 and indicators / max(len(lines), 1) > threshold
    return is_chat, seen


def extract_file_claims(lines: list[str]) -> list[FileClaim]:
    claims: list[FileClaim] = []
    for i, line in enumerate(lines, start=1):
        for claim_type, pattern in FILE_CLAIMS:
            for m in pattern.finditer(line):
                claims.append(
                    FileClaim(
                        type=claim_type,
                        file_path=m.group("path").strip(),
                        line=i,
                        context=line.strip(),
                    )
                )
    return claims


def fenced_code_lines(lines: list[str]) -> list[tuple[int, str]]:
    """(1-based line number, text) for every line inside a closed ``` fence."""
    result: list[tuple[int, str]] = []
    block: list[tuple[int, str]] = []
    in_block = False
    for i, line in enumerate(lines, start=1):
        if CODE_FENCE.match(line):
            if in_block:
                result.extend(block)
                block = []
            in_block = not in_block
            continue
        if in_block:
            block.append((i, line))
    return result


class HeuristicScanner:
    """Scans text with fixed pattern families and a workspace file probe."""

    def __init__(
        self,
        probe: FileProbe,
        chat_ratio_threshold: float | None = None,
        modification_window_minutes: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.probe = probe
        self.chat_ratio_threshold = (
            chat_ratio_threshold if chat_ratio_threshold is not None else settings.chat_ratio_threshold
        )
        self.modification_window_minutes = (
            modification_window_minutes
            if modification_window_minutes is not None
            else settings.modification_window_minutes
        )
        self._clock = clock

    async def scan(self, text: str) -> ScanReport:
        report = ScanReport()

        if not text.strip():
            report.errors.append(empty_content_finding())
            return report

        lines = text.split("\n")

        is_chat, _ = detect_chat_shape(lines, self.chat_ratio_threshold)
        if not is_chat:
            report.warnings.append(
                ValidationFinding(
                    type=FindingType.QUALITY,
                    message="Content does not appear to be chat content. Consider using a different validation method.",
                    severity=FindingSeverity.WARNING,
                    category="not_chat_content",
                    line=1,
                )
            )

        claim_warnings = self.scan_phrases(lines)
        report.warnings.extend(claim_warnings)
        report.extend(self.scan_code_blocks(lines))
        report.extend(await self.check_file_references(lines))
        report.extend(await self.check_file_claims(lines))

        if claim_warnings or report.errors:
            report.suggestions.extend(CLAIM_SUGGESTIONS)

        logger.debug(
            f"Scan complete: {len(report.errors)} errors, {len(report.warnings)} warnings"
        )
        return report

    # ── Pure stages ──

    def scan_phrases(self, lines: list[str]) -> list[ValidationFinding]:
        warnings: list[ValidationFinding] = []
        for i, line in enumerate(lines, start=1):
            for family in HALLUCINATION_FAMILIES:
                m = family.pattern.search(line)
                if m:
                    warnings.append(
                        ValidationFinding(
                            type=FindingType.HALLUCINATION,
                            message=f'{family.message}: "{m.group(0).strip()}"',
                            severity=FindingSeverity.WARNING,
                            category=family.category,
                            line=i,
                        )
                    )
        return warnings

    def scan_code_blocks(self, lines: list[str]) -> ScanReport:
        report = ScanReport()
        for line_no, line in fenced_code_lines(lines):
            for smell in CODE_SMELLS:
                if not smell.pattern.search(line):
                    continue
                finding = ValidationFinding(
                    type=FindingType.SECURITY if smell.severity == FindingSeverity.ERROR else FindingType.QUALITY,
                    message=smell.message,
                    severity=smell.severity,
                    category=smell.category,
                    line=line_no,
                )
                if smell.severity == FindingSeverity.ERROR:
                    report.errors.append(finding)
                else:
                    report.warnings.append(finding)
        return report

    # ── Probe-backed stages ──

    async def check_file_references(self, lines: list[str]) -> ScanReport:
        report = ScanReport()
        mentioned: dict[str, int] = {}
        for i, line in enumerate(lines, start=1):
            for pattern in FILE_REFERENCES:
                for m in pattern.finditer(line):
                    mentioned.setdefault(m.group(1), i)

        for file_path, line_no in mentioned.items():
            try:
                exists = await self.probe.exists(file_path)
            except Exception as e:
                logger.warning(f"Error checking file {file_path}: {e}")
                report.warnings.append(
                    ValidationFinding(
                        type=FindingType.QUALITY,
                        message=f"Error checking file {file_path}: {e}",
                        severity=FindingSeverity.WARNING,
                        category="file_check_error",
                        line=line_no,
                    )
                )
                continue
            if not exists:
                report.warnings.append(
                    ValidationFinding(
                        type=FindingType.HALLUCINATION,
                        message=f"File mentioned but not found: {file_path}",
                        severity=FindingSeverity.WARNING,
                        category="file_not_found",
                        line=line_no,
                    )
                )
        return report

    async def check_file_claims(self, lines: list[str]) -> ScanReport:
        report = ScanReport()
        for claim in extract_file_claims(lines):
            try:
                report.extend(await self._check_claim(claim))
            except Exception as e:
                logger.warning(f"Error validating file claim {claim.file_path}: {e}")
                report.warnings.append(
                    ValidationFinding(
                        type=FindingType.QUALITY,
                        message=f"Error validating file claim: {e}",
                        severity=FindingSeverity.WARNING,
                        category="file_validation_error",
                        line=claim.line,
                    )
                )

        for i, line in enumerate(lines, start=1):
            for family in SUSPICIOUS_FILESYSTEM_FAMILIES:
                if family.pattern.search(line):
                    report.warnings.append(
                        ValidationFinding(
                            type=FindingType.HALLUCINATION,
                            message=family.message,
                            severity=FindingSeverity.WARNING,
                            category=family.category,
                            line=i,
                        )
                    )
        return report

    async def _check_claim(self, claim: FileClaim) -> ScanReport:
        report = ScanReport()
        exists = await self.probe.exists(claim.file_path)

        if claim.type in (ClaimType.CREATION, ClaimType.EXISTENCE) and not exists:
            report.errors.append(
                ValidationFinding(
                    type=FindingType.HALLUCINATION,
                    message=f'AI claimed {claim.type.value.lower()} of file "{claim.file_path}" but file does not exist',
                    severity=FindingSeverity.ERROR,
                    category="filesystem_hallucination",
                    line=claim.line,
                )
            )

        elif claim.type == ClaimType.CONTENT and not exists:
            report.warnings.append(
                ValidationFinding(
                    type=FindingType.HALLUCINATION,
                    message=f'AI described the content of "{claim.file_path}" but file does not exist',
                    severity=FindingSeverity.WARNING,
                    category="unverifiable_content_claim",
                    line=claim.line,
                )
            )

        elif claim.type == ClaimType.MODIFICATION and exists:
            stat = await self.probe.stat(claim.file_path)
            age_seconds = self._clock() - stat.mtime
            if age_seconds > self.modification_window_minutes * 60:
                report.warnings.append(
                    ValidationFinding(
                        type=FindingType.QUALITY,
                        message=(
                            f'AI claimed to modify "{claim.file_path}" but file was last modified '
                            f"{round(age_seconds / 60)} minutes ago"
                        ),
                        severity=FindingSeverity.WARNING,
                        category="modification_timing",
                        line=claim.line,
                    )
                )

        return report
