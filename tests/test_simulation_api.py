import pytest
from fastapi.testclient import TestClient

from phishsim import simulation


@pytest.fixture
def sim_api(dispatcher):
    simulation.app.dependency_overrides[simulation.get_dispatcher] = lambda: dispatcher
    yield TestClient(simulation.app)
    simulation.app.dependency_overrides.clear()


def _send_payload(**kw):
    data = {
        "recipientEmail": "alice@example.com",
        "emailContent": "<a href='{{CLICK_LINK}}'>open</a>",
        "subject": "Invoice overdue",
        "attemptId": "att-1",
    }
    data.update(kw)
    return {"pattern": "send_phishing_email", "data": data}


def test_send_pattern(sim_api, transport):
    resp = sim_api.post("/messages", json=_send_payload())
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Phishing email sent successfully"
    assert "sentAt" in body
    assert "error" not in body
    assert len(transport.sent) == 1


def test_send_pattern_with_bad_payload(sim_api, transport):
    resp = sim_api.post("/messages", json=_send_payload(recipientEmail="not-an-email", subject=""))
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INVALID_PAYLOAD"
    assert "recipientEmail" in body["error"]["message"] or "recipient_email" in body["error"]["message"]
    assert transport.sent == []


def test_health_pattern(sim_api):
    resp = sim_api.post("/messages", json={"pattern": "health_check"})
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["emailServiceReady"] is True
    assert "timestamp" in body


def test_unknown_pattern(sim_api):
    resp = sim_api.post("/messages", json={"pattern": "launch_missiles", "data": {}})
    assert resp.status_code == 404


def test_health_endpoint(sim_api):
    assert sim_api.get("/health").json()["status"] == "healthy"
