"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from veracity.api.dependencies import get_rule_store
from veracity.core.rule_store import RuleStore

router = APIRouter()


@router.get("/health")
async def health(store: RuleStore = Depends(get_rule_store)):
    """Health check endpoint."""
    stats = store.get_stats()
    return {
        "status": "ok",
        "version": "1.0.0",
        "rules": stats.total_rules,
        "enabled_rules": stats.enabled_rules,
    }
