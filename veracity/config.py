"""
Veracity Configuration — pydantic-settings based.

All settings are read from environment variables (prefix VERACITY_) or .env file.
Nothing is required: every value has a working default for local use.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Workspace ──
    workspace_root: str = Field(
        default=".", description="Directory probed when verifying file claims"
    )
    workspace_ignore_dirs: list[str] = Field(
        default=["node_modules", ".git", "__pycache__", ".venv"],
        description="Directory names skipped when listing workspace files",
    )

    # ── Rules ──
    rules_path: str = Field(
        default=".veracity/rules.json", description="JSON file holding the rule array"
    )
    seed_default_rules: bool = Field(
        default=True, description="Seed the built-in rule set on startup (by name)"
    )
    strict_patterns: bool = Field(
        default=False,
        description="Reject uncompilable regex patterns at create/update time instead of logging",
    )

    # ── Validation ──
    minimal_rule_names: list[str] = Field(
        default=[
            "No Repetitive Confirmation or Stalling",
            "Implementation Verification",
            "Task Completion Claim",
        ],
        description="Rules run by the minimal (latency-sensitive) validation path",
    )
    modification_window_minutes: float = Field(
        default=5,
        description="Modification claims about files older than this are flagged",
    )
    chat_ratio_threshold: float = Field(
        default=0.1,
        description="Minimum share of chat-shaped lines before content counts as chat",
    )
    validation_soft_timeout_ms: int = Field(
        default=5000,
        description="Validations slower than this are logged; they are never aborted",
    )

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )

    # ── Audit ──
    audit_log_path: str = Field(
        default="audit.jsonl", description="Path to JSON-lines audit log file"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "VERACITY_",
        "case_sensitive": False,
    }


# Module-level singleton; import this rather than building Settings()
settings = Settings()
