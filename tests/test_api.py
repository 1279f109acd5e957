"""
Tests for the Veracity HTTP API — validation, rule management and alert routes.
"""

import pytest
from fastapi.testclient import TestClient

from veracity.alerts.sinks import LoggingAlertSink
from veracity.api.dependencies import (
    get_alert_scheduler,
    get_alert_sink,
    get_audit_logger,
    get_pipeline,
    get_rule_store,
)
from veracity.core.default_rules import DEFAULT_RULES
import veracity.main
from veracity.main import app
from veracity.models.rule_models import AlertingPolicy, Rule


@pytest.fixture
def client(seeded_store, pipeline, scheduler):
    app.dependency_overrides[get_rule_store] = lambda: seeded_store
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_alert_scheduler] = lambda: scheduler
    app.dependency_overrides[get_alert_sink] = lambda: LoggingAlertSink()
    app.dependency_overrides[get_audit_logger] = lambda: pipeline.audit_logger
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["rules"] == len(DEFAULT_RULES)
    assert data["enabled_rules"] == len(DEFAULT_RULES)


def test_validate_empty_text(client):
    response = client.post("/validate", json={"text": ""})
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert [e["category"] for e in data["errors"]] == ["empty_content"]


def test_validate_flags_unverified_claims(client):
    response = client.post(
        "/validate",
        json={"text": "I have successfully implemented the login feature and tested it", "context_label": "chat"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert "ai_hallucination" in {e["category"] for e in data["errors"]}
    assert "Veracity Passive Validation Applied" in data["validated_text"]


def test_validate_minimal_strips_stalling(client):
    response = client.post(
        "/validate/minimal", json={"text": "Ready to merge. Just let me know if you want changes."}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is True
    assert "let me know" not in data["validated_text"].lower()


def test_validation_stats_and_audit(client):
    client.post("/validate", json={"text": "Sunny weather today."})

    stats = client.get("/validate/stats").json()
    assert stats["total_responses"] == 1
    assert stats["validated_responses"] == 1

    audit = client.get("/audit/recent").json()
    assert len(audit) == 1
    assert audit[0]["mode"] == "full"


def test_rule_crud(client, rule_input):
    created = client.post("/rules", json=rule_input)
    assert created.status_code == 201
    rule_id = created.json()["id"]

    fetched = client.get(f"/rules/{rule_id}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == rule_input["name"]

    patched = client.patch(f"/rules/{rule_id}", json={"severity": "info"})
    assert patched.status_code == 200
    assert patched.json()["severity"] == "info"
    assert patched.json()["id"] == rule_id

    assert client.delete(f"/rules/{rule_id}").status_code == 204
    assert client.get(f"/rules/{rule_id}").status_code == 404
    assert client.delete(f"/rules/{rule_id}").status_code == 404


def test_create_rule_with_unknown_purpose_is_422(client, rule_input):
    response = client.post("/rules", json={**rule_input, "purpose": "marketing"})
    assert response.status_code == 422


def test_patch_unknown_rule_is_404(client):
    assert client.patch("/rules/rule_missing", json={"name": "x"}).status_code == 404


def test_list_rules_by_purpose(client):
    rules = client.get("/rules", params={"purpose": "security"}).json()
    assert rules
    assert {r["purpose"] for r in rules} == {"security"}


def test_toggle_rule(client, rule_input):
    rule_id = client.post("/rules", json=rule_input).json()["id"]

    response = client.post(f"/rules/{rule_id}/toggle", json={"enabled": False})
    assert response.status_code == 200
    assert response.json()["enabled"] is False

    stats = client.get("/rules/stats").json()
    assert stats["total_rules"] == len(DEFAULT_RULES) + 1
    assert stats["enabled_rules"] == len(DEFAULT_RULES)


def test_override_policies(client, rule_input):
    locked = client.post("/rules", json={**rule_input, "override": {"allowed": False}}).json()
    assert client.post(f"/rules/{locked['id']}/override", json={}).status_code == 403

    strict = client.post(
        "/rules", json={**rule_input, "name": "Strict", "override": {"requires_justification": True}}
    ).json()
    assert client.post(f"/rules/{strict['id']}/override", json={}).status_code == 422

    response = client.post(
        f"/rules/{strict['id']}/override", json={"justification": "test fixture key"}
    )
    assert response.status_code == 200
    assert response.json()["usage_stats"]["overrides"] == 1


def test_pending_alerts_round_trip(client, scheduler):
    rule = Rule(
        id="rule_manual",
        name="Manual",
        purpose="quality",
        severity="info",
        pattern_type="keyword",
        pattern="x",
        alerting=AlertingPolicy(when_to_alert="manual"),
    )
    scheduler.schedule_alert(rule, "held for review")

    pending = client.get("/alerts/pending").json()
    assert pending == [{"rule_id": "rule_manual", "message": "held for review", "count": 1}]

    assert client.delete("/alerts/pending/rule_manual").status_code == 204
    assert client.get("/alerts/pending").json() == []


def test_tech_debt_endpoint(client):
    text = "```js\nconst q = `SELECT * FROM users WHERE id = ${id}`;\n```"
    response = client.post("/tech-debt", json={"text": text})
    assert response.status_code == 200
    assert "sql_injection" in {e["category"] for e in response.json()["errors"]}


def test_malformed_request_body_is_422_with_echo(client):
    response = client.post("/validate", json={"context_label": "no text"})
    assert response.status_code == 422
    data = response.json()
    assert data["detail"]
    assert "no text" in data["body"]


def test_audit_summary(client):
    client.post("/validate", json={"text": ""})
    client.post("/validate/minimal", json={"text": "Sunny weather today."})

    summary = client.get("/audit/summary").json()
    assert summary["runs"] == 2
    assert summary["invalid"] == 1
    assert summary["errors"] == 1


def test_shutdown_cancels_alert_timers(monkeypatch):
    class CancelRecorder:
        cancelled = 0

        def cancel_all(self):
            self.cancelled += 1

    recorder = CancelRecorder()
    monkeypatch.setattr(veracity.main, "get_alert_scheduler", lambda: recorder)

    with TestClient(app):
        assert recorder.cancelled == 0
    assert recorder.cancelled == 1
