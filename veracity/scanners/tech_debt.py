"""
Tech Debt Evaluation — code-quality heuristics over fenced code blocks.

Each ``` block is analysed on its own (complexity, smells, maintainability,
performance, security debt), then the whole text gets structure checks
(file size, indentation consistency). Security debt is reported as errors,
everything else as warnings.
"""

from __future__ import annotations

import logging
import re

from veracity.models.validation_models import (
    FindingSeverity,
    FindingType,
    ScanReport,
    ValidationFinding,
)
from veracity.scanners.patterns import FENCED_BLOCK

logger = logging.getLogger("veracity.scanner.tech_debt")

LONG_FUNCTION_LINES = 50
MAX_NESTING = 4
HIGH_COMPLEXITY_DEPTH = 5
MAX_LINE_LENGTH = 120
LOW_COMMENT_RATIO = 0.1
HIGH_COMMENT_RATIO = 0.5
LARGE_FILE_LINES = 1000
INDENTATION_TOLERANCE = 5

_MAGIC_NUMBER = re.compile(r"\b\d{3,}\b")
_SMELL_MARKERS = ("TODO", "FIXME", "HACK")


def _warning(category: str, message: str, line: int, kind: FindingType = FindingType.QUALITY) -> ValidationFinding:
    return ValidationFinding(
        type=kind, message=message, severity=FindingSeverity.WARNING, category=category, line=line
    )


def _error(category: str, message: str, line: int) -> ValidationFinding:
    return ValidationFinding(
        type=FindingType.SECURITY, message=message, severity=FindingSeverity.ERROR, category=category, line=line
    )


def check_complexity(lines: list[str]) -> list[ValidationFinding]:
    """Brace-depth tracking: long blocks, deep nesting, overall complexity."""
    warnings: list[ValidationFinding] = []
    depth = 0
    max_depth = 0
    block_lines = 0

    for i, raw in enumerate(lines, start=1):
        line = raw.strip()
        if "{" in line and "}" not in line:
            depth += 1
            max_depth = max(max_depth, depth)
        if "}" in line and "{" not in line:
            depth = max(depth - 1, 0)
            if depth == 0:
                if block_lines > LONG_FUNCTION_LINES:
                    warnings.append(
                        _warning(
                            "long_function",
                            f"Long function detected ({block_lines} lines). Consider breaking it into smaller functions.",
                            i,
                        )
                    )
                block_lines = 0
        if depth > 0:
            block_lines += 1
        if depth > MAX_NESTING:
            warnings.append(
                _warning(
                    "deep_nesting",
                    f"Deep nesting detected (depth: {depth}). Consider refactoring to reduce complexity.",
                    i,
                )
            )

    if max_depth > HIGH_COMPLEXITY_DEPTH:
        warnings.append(
            _warning(
                "high_complexity",
                "High cyclomatic complexity detected. Consider simplifying the code structure.",
                1,
            )
        )
    return warnings


def detect_code_smells(lines: list[str]) -> list[ValidationFinding]:
    warnings: list[ValidationFinding] = []
    for i, line in enumerate(lines, start=1):
        marker = next((m for m in _SMELL_MARKERS if m in line), None)
        if marker:
            warnings.append(
                _warning("code_smell", f"Code smell: {marker} comment indicates technical debt", i)
            )
        if _MAGIC_NUMBER.search(line) and "//" not in line and "/*" not in line and "#" not in line:
            warnings.append(_warning("magic_number", "Magic number detected. Consider using named constants.", i))
        if len(line) > MAX_LINE_LENGTH:
            warnings.append(
                _warning(
                    "long_line",
                    f"Long line detected ({len(line)} characters). Consider breaking it into multiple lines.",
                    i,
                )
            )
        if "console.log" in line or "debugger" in line:
            warnings.append(_warning("dead_code", "Debug code detected. Remove before production.", i))
    return warnings


def check_maintainability(lines: list[str]) -> list[ValidationFinding]:
    code_lines = 0
    comment_lines = 0
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if line.startswith(("//", "/*", "#", "*")):
            comment_lines += 1
        else:
            code_lines += 1

    total = code_lines + comment_lines
    if total == 0:
        return []

    ratio = comment_lines / total
    if ratio < LOW_COMMENT_RATIO:
        return [_warning("low_documentation", "Low comment ratio detected. Consider adding more documentation.", 1)]
    if ratio > HIGH_COMMENT_RATIO:
        return [
            _warning(
                "over_documentation",
                "High comment ratio detected. Consider if code could be self-documenting.",
                1,
            )
        ]
    return []


def check_performance(lines: list[str]) -> list[ValidationFinding]:
    warnings: list[ValidationFinding] = []
    for i, line in enumerate(lines, start=1):
        if "innerHTML" in line and "//" not in line:
            warnings.append(
                _warning(
                    "inefficient_dom_manipulation",
                    "innerHTML usage detected. Consider using textContent for better performance and security.",
                    i,
                    FindingType.PERFORMANCE,
                )
            )
        if "eval(" in line or "Function(" in line:
            warnings.append(
                _warning(
                    "eval_usage",
                    "eval() or Function() constructor detected. These are performance and security risks.",
                    i,
                    FindingType.PERFORMANCE,
                )
            )
        if "addEventListener" in line and "removeEventListener" not in line:
            warnings.append(
                _warning(
                    "memory_leak",
                    "Event listener added without removal. Potential memory leak.",
                    i,
                    FindingType.PERFORMANCE,
                )
            )
    return warnings


def check_security_debt(lines: list[str]) -> list[ValidationFinding]:
    errors: list[ValidationFinding] = []
    for i, line in enumerate(lines, start=1):
        if "//" in line:
            continue
        if "SELECT" in line and "${" in line:
            errors.append(_error("sql_injection", "Potential SQL injection detected. Use parameterized queries.", i))
        if "innerHTML" in line and "${" in line:
            errors.append(_error("xss_vulnerability", "Potential XSS vulnerability detected. Sanitize user input.", i))
        lowered = line.lower()
        if any(word in lowered for word in ("password", "secret", "key", "token")):
            if "=" in line and '"' in line:
                errors.append(_error("hardcoded_secret", "Hardcoded secret detected. Use environment variables.", i))
    return errors


def analyze_structure(lines: list[str]) -> list[ValidationFinding]:
    warnings: list[ValidationFinding] = []
    if len(lines) > LARGE_FILE_LINES:
        warnings.append(
            _warning(
                "large_file",
                f"Large file detected ({len(lines)} lines). Consider splitting into smaller modules.",
                1,
            )
        )

    dedents = 0
    for prev, line in zip(lines, lines[1:]):
        if line and not line.startswith((" ", "\t")) and prev.startswith((" ", "\t")):
            dedents += 1
    if dedents > INDENTATION_TOLERANCE:
        warnings.append(
            _warning("inconsistent_formatting", "Inconsistent indentation detected. Consider using a formatter.", 1)
        )
    return warnings


def analyze_code(code: str) -> ScanReport:
    """All block-level heuristics for one code block."""
    lines = code.split("\n")
    report = ScanReport()
    report.warnings.extend(check_complexity(lines))
    report.warnings.extend(detect_code_smells(lines))
    report.warnings.extend(check_maintainability(lines))
    report.warnings.extend(check_performance(lines))
    report.errors.extend(check_security_debt(lines))
    return report


def evaluate_tech_debt(text: str) -> ScanReport:
    """
    Run the tech-debt heuristics over every fenced block plus the whole text.

    Never raises: an internal failure becomes a single error finding.
    """
    report = ScanReport()
    try:
        for block in FENCED_BLOCK.findall(text):
            report.extend(analyze_code(block))
        report.warnings.extend(analyze_structure(text.split("\n")))
    except Exception as e:
        logger.error(f"Tech debt evaluation failed: {e}", exc_info=True)
        report.errors.append(
            ValidationFinding(
                type=FindingType.QUALITY,
                message=f"Tech debt evaluation failed: {e}",
                severity=FindingSeverity.ERROR,
                category="tech_debt_evaluation_error",
                line=1,
            )
        )
    return report
