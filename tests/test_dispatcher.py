import subprocess
import sys
from datetime import datetime
from pathlib import Path

import pytest

from conftest import TRACKING_BASE, FakeTransport

from phishsim.dispatcher import (
    SendDispatcher, UnknownPattern, build_tracking_url, dispatch_message, html_to_text, render_content,
)
from phishsim.mailer import DeliveryResult
from phishsim.schemas import SendRequest


def _request(**kw):
    data = dict(
        recipient_email="alice@example.com",
        email_content="<p>Hi, <a href='{{CLICK_LINK}}'>verify</a> before {{TIMESTAMP}}</p>",
        subject="Verify your account",
        attempt_id="abc123",
    )
    data.update(kw)
    return SendRequest(**data)


def test_build_tracking_url():
    assert build_tracking_url("http://h/phishing/click", "a1") == "http://h/phishing/click/a1"
    assert build_tracking_url("http://h/phishing/click/", "a1") == "http://h/phishing/click/a1"


def test_render_replaces_every_occurrence():
    out = render_content("{{CLICK_LINK}} and {{CLICK_LINK}} at {{TIMESTAMP}}", "http://t/1",
                         timestamp=datetime(2024, 5, 1, 10, 0, 0))
    assert out == "http://t/1 and http://t/1 at 2024-05-01 10:00:00 UTC"


def test_render_leaves_other_tokens_alone():
    content = "Hello {{name}}, total {{ 7*7 }} {{ CLICK_LINK }} <a href='{{CLICK_LINK}}'>x</a>"
    out = render_content(content, "http://t/1")
    assert out == "Hello {{name}}, total {{ 7*7 }} {{ CLICK_LINK }} <a href='http://t/1'>x</a>"


def test_render_does_not_evaluate_template_code():
    content = (
        "{% for i in range(3) %}{{ i }}{% endfor %} "
        "{{ CLICK_LINK.__class__.__mro__[1].__subclasses__()|length }} {{CLICK_LINK}}"
    )
    out = render_content(content, "http://t/1")
    assert out == (
        "{% for i in range(3) %}{{ i }}{% endfor %} "
        "{{ CLICK_LINK.__class__.__mro__[1].__subclasses__()|length }} http://t/1"
    )


def test_render_inserts_url_verbatim():
    assert render_content("{{CLICK_LINK}}", r"http://t/a\1?x=1&y=2") == r"http://t/a\1?x=1&y=2"


def test_html_to_text_collapses_whitespace():
    assert html_to_text("<p>Hello</p>\n\n<p>   World  </p>") == "Hello World"
    assert "<" not in html_to_text("<div><h2>Alert</h2><p>Act <b>now</b></p></div>")


def test_handle_send_success(dispatcher, transport):
    result = dispatcher.handle_send(_request())

    assert result.success
    assert result.message == "Phishing email sent successfully"
    assert result.sent_at is not None
    assert result.error is None

    [sent] = transport.sent
    assert sent.to == "alice@example.com"
    assert sent.sender == "security-team@example.com"
    assert sent.subject == "Verify your account"
    assert f"{TRACKING_BASE}/abc123" in sent.html
    assert "{{CLICK_LINK}}" not in sent.html
    assert "{{TIMESTAMP}}" not in sent.html
    assert "<" not in sent.text
    assert "verify" in sent.text


def test_handle_send_transport_failure():
    transport = FakeTransport(result=DeliveryResult(success=False, error_code="ECONNECTION",
                                                    error_message="connection refused"))
    result = SendDispatcher(transport, TRACKING_BASE, "s@example.com").handle_send(_request())

    assert not result.success
    assert result.message == "Failed to send phishing email"
    assert result.error.code == "ECONNECTION"
    assert result.error.message == "connection refused"
    assert result.sent_at is None


def test_handle_send_never_raises():
    class Exploding(FakeTransport):
        def send(self, message):
            raise RuntimeError("boom")

    result = SendDispatcher(Exploding(), TRACKING_BASE, "s@example.com").handle_send(_request())
    assert not result.success
    assert result.error.code == "INTERNAL_ERROR"
    assert result.error.message == "boom"


def test_health_states():
    def status(healthy):
        return SendDispatcher(FakeTransport(healthy=healthy), TRACKING_BASE, "s@example.com").handle_health_check()

    ok = status(True)
    assert ok.status == "healthy" and ok.email_service_ready

    degraded = status(False)
    assert degraded.status == "degraded" and not degraded.email_service_ready

    assert status(RuntimeError("down")).status == "unhealthy"


def test_dispatch_message_routes_patterns(dispatcher, transport):
    reply = dispatch_message(dispatcher, "send_phishing_email", _request().to_wire())
    assert reply["success"] is True
    assert len(transport.sent) == 1

    assert dispatch_message(dispatcher, "health_check", {})["status"] == "healthy"

    with pytest.raises(UnknownPattern):
        dispatch_message(dispatcher, "launch_missiles", {})


def test_dispatch_message_rejects_bad_payload(dispatcher, transport):
    reply = dispatch_message(dispatcher, "send_phishing_email", {"recipientEmail": "nope"})
    assert reply["success"] is False
    assert reply["error"]["code"] == "INVALID_PAYLOAD"
    assert transport.sent == []


def test_management_side_does_not_load_simulation_app():
    code = "import sys, phishsim.channel; sys.exit('phishsim.simulation' in sys.modules)"
    done = subprocess.run([sys.executable, "-c", code], cwd=Path(__file__).resolve().parents[1])
    assert done.returncode == 0
