"""
Rule Repository — JSON file persistence for the rule array.

Load and save failures are logged and never raised. A corrupt file loads as
an empty rule list.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from veracity.config import settings
from veracity.models.rule_models import Rule

logger = logging.getLogger("veracity.storage")

_RULE_LIST = TypeAdapter(list[Rule])


class RuleRepository:
    """Reads and writes all rules as one JSON array."""

    def __init__(self, path: str | None = None) -> None:
        self.path = Path(path or settings.rules_path)

    def load(self) -> list[Rule]:
        if not self.path.exists():
            return []
        try:
            rules = _RULE_LIST.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.error(f"Error loading rules from {self.path}: {e}")
            return []
        logger.info(f"Loaded {len(rules)} rules")
        return rules

    def save(self, rules: list[Rule]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(_RULE_LIST.dump_json(rules, indent=2))
        except OSError as e:
            logger.error(f"Failed to save rules to {self.path}: {e}")
            return
        logger.debug(f"Saved {len(rules)} rules")
