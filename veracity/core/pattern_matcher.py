"""
Pattern Matcher — Tests content against one rule pattern.

Three interpretations:
- regex:    case-insensitive regular expression
- keyword:  comma-separated keywords, any one found as a substring
- semantic: plain case-insensitive containment of the whole pattern

Pure functions. Compiled regexes are cached by pattern string, so an updated
rule pattern simply compiles under a new key.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from veracity.core.errors import PatternCompileError
from veracity.models.rule_models import PatternType


@dataclass(frozen=True)
class MatchOutcome:
    matched: bool
    matched_text: str = ""
    index: int = -1
    error: str | None = None


NO_MATCH = MatchOutcome(matched=False)


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a regex rule pattern, raising PatternCompileError on failure."""
    try:
        return _compile(pattern)
    except re.error as e:
        raise PatternCompileError(pattern, str(e)) from e


def split_keywords(pattern: str) -> list[str]:
    return [k.strip().lower() for k in pattern.split(",") if k.strip()]


def _find_literal(needle: str, content: str) -> re.Match[str] | None:
    # Offsets must index the original content; lower() can change its length.
    return re.search(re.escape(needle), content, re.IGNORECASE)


def check_pattern(pattern: str, pattern_type: PatternType) -> str | None:
    """Return an error description if the pattern is unusable, else None."""
    if pattern_type == PatternType.REGEX:
        try:
            compile_pattern(pattern)
        except PatternCompileError as e:
            return e.reason
    elif pattern_type == PatternType.KEYWORD and not split_keywords(pattern):
        return "no keywords"
    return None


def match(pattern: str, pattern_type: PatternType, content: str) -> MatchOutcome:
    """Test ``content`` against one pattern. Never raises for a bad pattern."""
    if pattern_type == PatternType.REGEX:
        try:
            regex = compile_pattern(pattern)
        except PatternCompileError:
            return MatchOutcome(matched=False, error="invalid pattern")
        found = regex.search(content)
        if found is None:
            return NO_MATCH
        return MatchOutcome(matched=True, matched_text=found.group(0), index=found.start())

    if pattern_type == PatternType.KEYWORD:
        for keyword in split_keywords(pattern):
            found = _find_literal(keyword, content)
            if found is not None:
                return MatchOutcome(matched=True, matched_text=keyword, index=found.start())
        return NO_MATCH

    if pattern_type == PatternType.SEMANTIC:
        found = _find_literal(pattern, content) if pattern else None
        if found is None:
            return NO_MATCH
        return MatchOutcome(matched=True, matched_text=found.group(0), index=found.start())

    return MatchOutcome(matched=False, error=f"unknown pattern type: {pattern_type}")


def strip_matches(pattern: str, pattern_type: PatternType, content: str) -> str:
    """Remove every occurrence of the pattern from ``content``."""
    if pattern_type == PatternType.REGEX:
        return compile_pattern(pattern).sub("", content)
    if pattern_type == PatternType.KEYWORD:
        for keyword in split_keywords(pattern):
            content = re.sub(re.escape(keyword), "", content, flags=re.IGNORECASE)
        return content
    return re.sub(re.escape(pattern), "", content, flags=re.IGNORECASE)


def line_for(content: str, index: int) -> int | None:
    """Map a character offset to a 1-based line number."""
    if index < 0:
        return None
    return content.count("\n", 0, index) + 1
