import pytest
import resend

from utils.clients.email import EmailDeliveryError, send_report_email
from utils.screenshots import MSHOTS_URL, screenshot_url
from utils.sse import sse_event


class TestReportEmail:
    def test_sends_pdf_attachment(self, monkeypatch):
        sent = {}

        def fake_send(params):
            sent.update(params)
            return {"id": "msg_123"}

        monkeypatch.setattr(resend.Emails, "send", fake_send)
        message_id = send_report_email("buyer@example.com", b"%PDF-1.4", "cro-report.pdf", "re_key", "reports@example.com")

        assert message_id == "msg_123"
        assert sent["to"] == ["buyer@example.com"]
        assert sent["attachments"] == [{"filename": "cro-report.pdf", "content": list(b"%PDF-1.4")}]
        assert resend.api_key == "re_key"

    def test_provider_failure(self, monkeypatch):
        def fake_send(params):
            raise RuntimeError("domain not verified")

        monkeypatch.setattr(resend.Emails, "send", fake_send)
        with pytest.raises(EmailDeliveryError, match="domain not verified"):
            send_report_email("buyer@example.com", b"x", "r.pdf", "re_key", "reports@example.com")

    def test_not_configured(self):
        with pytest.raises(EmailDeliveryError):
            send_report_email("buyer@example.com", b"x", "r.pdf", "", "reports@example.com")


def test_screenshot_url_encodes_target():
    url = screenshot_url("https://acme.test/a?b=1")
    assert url == MSHOTS_URL.replace("{URL}", "https%3A%2F%2Facme.test%2Fa%3Fb%3D1")


def test_screenshot_url_template():
    assert screenshot_url("https://acme.test", "https://shots.test/?u={URL}") == "https://shots.test/?u=https%3A%2F%2Facme.test"


def test_sse_event_format():
    assert sse_event("progress", {"value": 5}) == 'event: progress\ndata: {"value": 5}\n\n'
    assert sse_event("error", {"message": "é"}) == 'event: error\ndata: {"message": "é"}\n\n'
