"""
Scanner Patterns — fixed regex families used by the heuristic scanner.

These are independent of user rules: they describe phrasing that commonly
accompanies fabricated claims, and code smells worth flagging inside fenced
code blocks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from veracity.models.validation_models import ClaimType, FindingSeverity

_I = re.IGNORECASE


@dataclass(frozen=True)
class PhraseFamily:
    category: str
    pattern: re.Pattern[str]
    message: str


@dataclass(frozen=True)
class CodeSmell:
    category: str
    pattern: re.Pattern[str]
    message: str
    severity: FindingSeverity


# ── Chat shape ──

ROLE_MARKER = re.compile(
    r"^(?:user|assistant|system|human|ai|bot|gpt|claude|bard|perplexity|anthropic|openai):", _I
)
MESSAGE_MARKER = re.compile(r"^[-#>*]\s")
TIMESTAMP = re.compile(r"\d{1,2}:\d{2}(?::\d{2})?\s*(?:AM|PM)?", _I)
CONVERSATION_FLOW = re.compile(r"^(?:me:|you:|i said:|you said:)", _I)

CHAT_SHAPE_MARKERS: dict[str, re.Pattern[str]] = {
    "role_indicator": ROLE_MARKER,
    "message_marker": MESSAGE_MARKER,
    "timestamp": TIMESTAMP,
    "conversation_flow": CONVERSATION_FLOW,
}

# ── Hallucination phrase families ──

HALLUCINATION_FAMILIES: tuple[PhraseFamily, ...] = (
    PhraseFamily(
        "unverified_action_claim",
        re.compile(
            r"\bi\s+(?:have|will|can|did|am\s+going\s+to)\s+"
            r"(?:created|modified|updated|added|implemented|fixed|built|developed|generated)\b",
            _I,
        ),
        "AI claims to have performed actions that may not be verifiable",
    ),
    PhraseFamily(
        "unverified_implementation_claim",
        re.compile(
            r"\b(?:i\s+have|i've|i\s+just)\s+(?:successfully|properly|correctly|fully)\s+"
            r"(?:implemented|created|added|fixed|built)\b",
            _I,
        ),
        "Unverified implementation claim",
    ),
    PhraseFamily(
        "unverified_testing_claim",
        re.compile(
            r"\b(?:tested|verified|validated|confirmed)\s+(?:it|this|that|and|everything)\b", _I
        ),
        "Unverified testing claim",
    ),
    PhraseFamily(
        "unverified_verification_claim",
        re.compile(r"\b(?:i\s+have|i've)\s+(?:checked|verified|confirmed|validated|tested)\b", _I),
        "AI claims to have verified something without evidence",
    ),
    PhraseFamily(
        "file_existence_claim",
        re.compile(
            r"\b(?:file|folder|directory|project)\s+(?:exists|is\s+present|has\s+been\s+created|was\s+created)\b",
            _I,
        ),
        "AI claims about file/folder existence without verification",
    ),
    PhraseFamily(
        "unverified_completion_claim",
        re.compile(
            r"\b(?:successfully|completed|finished|done)\s+"
            r"(?:creating|modifying|updating|adding|implementing|fixing)\b",
            _I,
        ),
        "AI claims task completion without evidence",
    ),
    PhraseFamily(
        "unverified_creation_claim",
        re.compile(
            r"\b(?:here\s+is|here's|i've\s+created|i\s+created)\s+(?:the|a|an)\s+"
            r"(?:file|code|implementation|solution)\b",
            _I,
        ),
        "AI claims to have created files or code without verification",
    ),
    PhraseFamily(
        "future_action_promise",
        re.compile(
            r"\b(?:let\s+me|i'll|i\s+will)\s+(?:create|generate|build|implement|develop)\s+(?:a|an|the)\b",
            _I,
        ),
        "AI promises future actions that may not be completed",
    ),
    PhraseFamily(
        "vague_capability_offer",
        re.compile(r"\bi\s+(?:can|could|would|might)\s+(?:help|assist|create|generate|build)\b", _I),
        "AI makes capability claims without demonstration",
    ),
    PhraseFamily(
        "file_content_claim",
        re.compile(r"\b(?:the|this)\s+(?:file|code)\s+(?:contains|includes|has|shows)\b", _I),
        "AI makes claims about file content without verification",
    ),
    PhraseFamily(
        "project_structure_claim",
        re.compile(r"\b(?:the|this)\s+(?:project|workspace)\s+(?:has|contains|includes)\b", _I),
        "AI makes claims about project structure without verification",
    ),
    PhraseFamily(
        "unverified_discovery_claim",
        re.compile(r"\bi\s+(?:found|discovered|located|identified)\b", _I),
        "AI claims to have discovered something without evidence",
    ),
)

SUSPICIOUS_FILESYSTEM_FAMILIES: tuple[PhraseFamily, ...] = (
    PhraseFamily(
        "suspicious_filesystem_pattern",
        re.compile(r"\bi\s+(?:can\s+see|can\s+find|found|located)\s+(?:the|this)\s+(?:file|folder)\b", _I),
        "AI claims to have found files without providing evidence",
    ),
    PhraseFamily(
        "suspicious_filesystem_pattern",
        re.compile(
            r"\b(?:the|this)\s+(?:file|folder)\s+(?:should|ought\s+to|must)\s+be\s+(?:at|in|under)\b", _I
        ),
        "AI makes assumptions about file locations without verification",
    ),
    PhraseFamily(
        "suspicious_filesystem_pattern",
        re.compile(
            r"\b(?:i\s+have|i've)\s+(?:created|made|generated)\s+(?:all|several|multiple)\s+(?:files|folders)\b",
            _I,
        ),
        "AI claims to have created multiple files without listing them",
    ),
    PhraseFamily(
        "suspicious_filesystem_pattern",
        re.compile(
            r"\b(?:the|this)\s+(?:project|workspace)\s+(?:structure|layout|organization)\s+"
            r"(?:is|looks\s+like|contains)\b",
            _I,
        ),
        "AI makes claims about project structure without verification",
    ),
)

# ── Fenced code ──

CODE_FENCE = re.compile(r"^```(\w+)?\s*$")
FENCED_BLOCK = re.compile(r"```[\s\S]*?```")

CODE_SMELLS: tuple[CodeSmell, ...] = (
    CodeSmell(
        "debug_statement",
        re.compile(r"\bconsole\.log\(|\bdebugger\b|^\s*print\("),
        "Debug code detected - consider removing debug statements",
        FindingSeverity.WARNING,
    ),
    CodeSmell(
        "todo_marker",
        re.compile(r"\b(?:TODO|FIXME|HACK|XXX)\b"),
        "Code contains TODO/FIXME comments that need attention",
        FindingSeverity.WARNING,
    ),
    CodeSmell(
        "hardcoded_secret",
        re.compile(
            r"\b(?:password|passwd|secret|api[_-]?key|token)\w*\s*[:=]\s*[\"'][^\"']+[\"']", _I
        ),
        "Potential hardcoded secret detected in code",
        FindingSeverity.ERROR,
    ),
    CodeSmell(
        "eval_usage",
        re.compile(r"\beval\s*\(|\bnew\s+Function\s*\(|\bFunction\s*\("),
        "eval() or Function() constructor detected",
        FindingSeverity.ERROR,
    ),
    CodeSmell(
        "sql_injection",
        re.compile(
            r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b.*(?:[\"']\s*\+|\+\s*[\"']|\$\{|%s[\"']\s*%|\bf[\"'])", _I
        ),
        "SQL built by string concatenation. Use parameterized queries.",
        FindingSeverity.ERROR,
    ),
    CodeSmell(
        "xss_vulnerability",
        re.compile(r"\binnerHTML\s*=.*(?:\$\{|\+)"),
        "innerHTML assigned from interpolated content. Sanitize user input.",
        FindingSeverity.ERROR,
    ),
)

# ── File references and claims ──

_EXTENSIONS = r"(?:js|ts|jsx|tsx|py|java|cpp|c|h|json|xml|yaml|yml|md|txt|css|html)"

FILE_REFERENCES: tuple[re.Pattern[str], ...] = (
    re.compile(rf"`([^`\s]+\.{_EXTENSIONS})`"),
    re.compile(rf"\"([^\"\s]+\.{_EXTENSIONS})\""),
    re.compile(rf"'([^'\s]+\.{_EXTENSIONS})'"),
)

_QUOTED_PATH = r"[\"`'](?P<path>[^\"`']+)[\"`']"

FILE_CLAIMS: tuple[tuple[ClaimType, re.Pattern[str]], ...] = (
    (
        ClaimType.CREATION,
        re.compile(
            r"\b(?:(?:i\s+have|i've)\s+(?:created|made|generated)|i\s+created|i\s+made|i\s+generated)\s+"
            rf"(?:a|an|the)\s+(?:file|folder|directory)\s+(?:called|named|at)\s+{_QUOTED_PATH}",
            _I,
        ),
    ),
    (
        ClaimType.EXISTENCE,
        re.compile(
            rf"\b(?:the|this)\s+(?:file|folder)\s+{_QUOTED_PATH}\s+"
            r"(?:exists|is\s+present|has\s+been\s+created|was\s+created)",
            _I,
        ),
    ),
    (
        ClaimType.MODIFICATION,
        re.compile(
            rf"\bi\s+(?:modified|updated|changed|edited)\s+(?:the|this)\s+file\s+{_QUOTED_PATH}",
            _I,
        ),
    ),
    (
        ClaimType.CONTENT,
        re.compile(
            rf"\b(?:file|folder|directory)\s+{_QUOTED_PATH}\s+(?:contains|includes|has)\s+"
            r"(?:the\s+following|this\s+content|these\s+changes)",
            _I,
        ),
    ),
)

CLAIM_SUGGESTIONS: tuple[str, ...] = (
    "Consider requesting specific evidence or verification steps",
    "Ask for file listings, code snippets, or test results",
    "Verify claims manually before proceeding with implementation",
)
