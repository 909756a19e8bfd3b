import pytest
import requests

from productlobby_insights.config import EmailSettings
from productlobby_insights.services.email import (
    EmailDeliveryError, EmailSender, create_email_session
)


class FakeResponse:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


def make_sender(session, api_key="re_test_key"):
    return EmailSender(
        EmailSettings(api_key=api_key, sender="ProductLobby <noreply@productlobby.test>",
                      api_url="https://mail.example.test/emails"),
        session=session,
    )


class TestEmailSender:
    def test_successful_send(self):
        session = FakeSession(FakeResponse(200))
        result = make_sender(session).send_email("ann@example.com", "Hello", "<p>Hi</p>")

        assert result.success
        assert result.error is None
        call = session.calls[0]
        assert call["url"] == "https://mail.example.test/emails"
        assert call["headers"]["Authorization"] == "Bearer re_test_key"
        assert call["json"] == {
            "from": "ProductLobby <noreply@productlobby.test>",
            "to": ["ann@example.com"],
            "subject": "Hello",
            "html": "<p>Hi</p>",
        }
        assert call["timeout"] == 30

    def test_rejected_by_api(self):
        session = FakeSession(FakeResponse(422, '{"message": "invalid to"}'))
        result = make_sender(session).send_email("bad", "Hello", "<p>Hi</p>")
        assert not result.success
        assert result.error == "Mail API returned 422"

    def test_network_error(self):
        session = FakeSession(error=requests.exceptions.ConnectionError("connection refused"))
        result = make_sender(session).send_email("ann@example.com", "Hello", "<p>Hi</p>")
        assert not result.success
        assert result.error.startswith("Email request failed:")
        assert "connection refused" in result.error

    def test_missing_api_key(self):
        session = FakeSession(FakeResponse(200))
        with pytest.raises(EmailDeliveryError):
            make_sender(session, api_key=None).send_email("ann@example.com", "Hello", "<p>Hi</p>")
        assert session.calls == []


def test_email_session_retries_post():
    adapter = create_email_session().get_adapter("https://api.resend.com/emails")
    retry = adapter.max_retries
    assert retry.total == 3
    assert 429 in retry.status_forcelist
    assert "POST" in retry.allowed_methods
