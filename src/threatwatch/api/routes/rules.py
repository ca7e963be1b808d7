# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Monitoring rule endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from threatwatch.api.auth import require_api_key
from threatwatch.api.deps import get_service
from threatwatch.models.rule import MonitoringRule, RuleDraft, RulePatch
from threatwatch.monitoring.service import MonitoringService

router = APIRouter()


@router.get("/rules", response_model=list[MonitoringRule])
async def list_rules(
    enabled: bool | None = None,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> list[MonitoringRule]:
    rules = service.list_rules()
    if enabled is not None:
        rules = [r for r in rules if r.enabled == enabled]
    return rules


@router.post("/rules", response_model=MonitoringRule, status_code=201)
async def create_rule(
    body: RuleDraft,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> MonitoringRule:
    return service.add_rule(body)


@router.get("/rules/{rule_id}", response_model=MonitoringRule)
async def get_rule(
    rule_id: str,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> MonitoringRule:
    rule = service.get_rule(rule_id)
    if rule is None:
        raise HTTPException(status_code=404, detail=f"Rule not found: {rule_id}")
    return rule


@router.patch("/rules/{rule_id}", response_model=MonitoringRule)
async def update_rule(
    rule_id: str,
    body: RulePatch,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> MonitoringRule:
    rule = service.update_rule(rule_id, body)
    if rule is None:
        raise HTTPException(status_code=404, detail=f"Rule not found: {rule_id}")
    return rule


@router.delete("/rules/{rule_id}", status_code=204)
async def delete_rule(
    rule_id: str,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> Response:
    if not service.delete_rule(rule_id):
        raise HTTPException(status_code=404, detail=f"Rule not found: {rule_id}")
    return Response(status_code=204)
