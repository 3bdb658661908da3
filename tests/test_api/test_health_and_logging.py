"""
Health endpoints and log redaction.
"""

from fastapi.testclient import TestClient

from app.main import create_app
from app.observability.logging import REDACTED, redact_secrets


def test_health_always_answers():
    # No database is reachable in the test environment
    response = TestClient(create_app()).get("/health")
    assert response.status_code == 200
    assert response.json()["status"] in ("healthy", "degraded")


def test_redact_secrets_masks_password_keys():
    event = redact_secrets(None, "info", {"event": "credential_saved", "password": "abc", "priority": 1})
    assert event["password"] == REDACTED
    assert event["priority"] == 1


def test_redact_secrets_leaves_other_events():
    event = {"event": "document_ingested", "candidates": 3}
    assert redact_secrets(None, "info", dict(event)) == event
