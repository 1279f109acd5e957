"""
Rule Routes — CRUD, toggling, overrides and statistics for rules.

InvalidRuleError maps to 422, unknown ids to 404.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from veracity.api.dependencies import get_rule_store
from veracity.core.errors import InvalidRuleError, RuleNotFoundError
from veracity.core.rule_store import RuleStore
from veracity.models.api_models import OverrideRequest, ToggleRequest
from veracity.models.rule_models import Rule, RuleStats

logger = logging.getLogger("veracity.api.rules")

router = APIRouter(prefix="/rules")


def _not_found(rule_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=str(RuleNotFoundError(rule_id)))


@router.get("", response_model=list[Rule])
async def list_rules(
    purpose: str | None = None,
    role: str | None = None,
    store: RuleStore = Depends(get_rule_store),
):
    if role:
        return store.get_rules_by_role(role)
    if purpose:
        return store.get_rules_by_purpose(purpose)
    return store.get_all_rules()


@router.post("", response_model=Rule, status_code=201)
async def create_rule(body: dict, store: RuleStore = Depends(get_rule_store)):
    try:
        return store.create_rule(body)
    except InvalidRuleError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/stats", response_model=RuleStats)
async def rule_stats(store: RuleStore = Depends(get_rule_store)):
    return store.get_stats()


@router.get("/{rule_id}", response_model=Rule)
async def get_rule(rule_id: str, store: RuleStore = Depends(get_rule_store)):
    rule = store.get_rule(rule_id)
    if rule is None:
        raise _not_found(rule_id)
    return rule


@router.patch("/{rule_id}", response_model=Rule)
async def update_rule(rule_id: str, patch: dict, store: RuleStore = Depends(get_rule_store)):
    try:
        rule = store.update_rule(rule_id, patch)
    except InvalidRuleError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if rule is None:
        raise _not_found(rule_id)
    return rule


@router.delete("/{rule_id}", status_code=204)
async def delete_rule(rule_id: str, store: RuleStore = Depends(get_rule_store)):
    if not store.delete_rule(rule_id):
        raise _not_found(rule_id)


@router.post("/{rule_id}/toggle", response_model=Rule)
async def toggle_rule(rule_id: str, body: ToggleRequest, store: RuleStore = Depends(get_rule_store)):
    if not store.toggle_rule(rule_id, body.enabled):
        raise _not_found(rule_id)
    return store.get_rule(rule_id)


@router.post("/{rule_id}/override", response_model=Rule)
async def override_rule(
    rule_id: str,
    body: OverrideRequest,
    store: RuleStore = Depends(get_rule_store),
):
    rule = store.get_rule(rule_id)
    if rule is None:
        raise _not_found(rule_id)
    if not rule.override.allowed:
        raise HTTPException(status_code=403, detail=f'Rule "{rule.name}" cannot be overridden')
    if rule.override.requires_justification and not (body.justification or "").strip():
        raise HTTPException(status_code=422, detail=f'Rule "{rule.name}" requires a justification')

    store.record_override(rule_id)
    logger.info(f"Override recorded for rule {rule.name}")
    return store.get_rule(rule_id)
