"""
Alert Routes — pending alerts, suppression, the dashboard feed and the audit trail.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from veracity.alerts.scheduler import AlertScheduler
from veracity.alerts.sinks import FeedItem, LoggingAlertSink
from veracity.api.dependencies import get_alert_scheduler, get_alert_sink, get_audit_logger
from veracity.audit.logger import AuditLogger
from veracity.models.alert_models import PendingAlert
from veracity.models.validation_models import AuditSummary

router = APIRouter()


@router.get("/alerts/pending", response_model=list[PendingAlert])
async def pending_alerts(scheduler: AlertScheduler = Depends(get_alert_scheduler)):
    return scheduler.get_pending_alerts()


@router.delete("/alerts/pending/{rule_id}", status_code=204)
async def clear_pending_alert(rule_id: str, scheduler: AlertScheduler = Depends(get_alert_scheduler)):
    scheduler.clear_pending_alert(rule_id)


@router.delete("/alerts/suppression/{rule_id}", status_code=204)
async def clear_suppression(rule_id: str, scheduler: AlertScheduler = Depends(get_alert_scheduler)):
    scheduler.clear_suppression(rule_id)


@router.get("/alerts/feed", response_model=list[FeedItem])
async def alert_feed(count: int = 50, sink: LoggingAlertSink = Depends(get_alert_sink)):
    return sink.recent(count)


@router.get("/audit/recent")
async def recent_audit(count: int = 50, audit: AuditLogger = Depends(get_audit_logger)):
    return audit.read_recent(count)


@router.get("/audit/summary", response_model=AuditSummary)
async def audit_summary(audit: AuditLogger = Depends(get_audit_logger)):
    return audit.summary()
