"""
Audit Logger — JSON-lines trail of validation runs.

One line per validate()/validate_minimal() call: UTC timestamp, context label,
mode, validity, finding and change counts, whether the run fell back, and
duration. Writes are serialised with a lock; a failed write is logged and the
validation result is unaffected.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from veracity.config import settings
from veracity.models.validation_models import AuditEntry, AuditSummary, ValidationResult

logger = logging.getLogger("veracity.audit")


class AuditLogger:
    """Append-only audit trail backed by a JSON-lines file."""

    def __init__(self, log_path: str | None = None) -> None:
        self.log_path = Path(log_path or settings.audit_log_path)
        self._lock = threading.Lock()

    def record_validation(
        self,
        result: ValidationResult,
        context_label: str,
        mode: str,
        fallback: bool = False,
    ) -> AuditEntry:
        entry = AuditEntry(
            context_label=context_label,
            mode=mode,
            is_valid=result.is_valid,
            error_count=len(result.errors),
            warning_count=len(result.warnings),
            change_count=len(result.change_log),
            fallback=fallback,
            duration_ms=round(result.duration_ms, 2),
        )
        self.log(entry)
        return entry

    def log(self, entry: AuditEntry) -> None:
        line = json.dumps(
            {"timestamp": datetime.now(timezone.utc).isoformat(), **entry.model_dump()}
        )
        with self._lock:
            try:
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
                with self.log_path.open("a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError as e:
                logger.error(f"Failed to write audit log {self.log_path}: {e}")

    def read_recent(self, count: int = 50) -> list[dict]:
        """Most recent ``count`` entries, oldest first. Corrupt lines are skipped."""
        if count <= 0:
            return []
        return self._read_all()[-count:]

    def summary(self) -> AuditSummary:
        entries = self._read_all()
        summary = AuditSummary(runs=len(entries))
        for e in entries:
            if e.get("fallback"):
                summary.fallbacks += 1
            elif not e.get("is_valid", True):
                summary.invalid += 1
            summary.errors += e.get("error_count", 0)
            summary.warnings += e.get("warning_count", 0)
            summary.changes += e.get("change_count", 0)
        return summary

    def _read_all(self) -> list[dict]:
        if not self.log_path.exists():
            return []

        entries: list[dict] = []
        skipped = 0
        try:
            lines = self.log_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.error(f"Failed to read audit log {self.log_path}: {e}")
            return []

        for raw in lines:
            if not raw.strip():
                continue
            try:
                entries.append(json.loads(raw))
            except json.JSONDecodeError:
                skipped += 1
        if skipped:
            logger.debug(f"Skipped {skipped} corrupt audit lines in {self.log_path}")
        return entries
