from types import SimpleNamespace

import pytest
import requests

from docucloud_site.config import Settings
from docucloud_site.services import notifications
from docucloud_site.services.notifications import (
    LogNotifier, SendGridNotifier, admin_subject, build_notifier, render_admin_email,
    render_customer_email,
)


def _inquiry(**overrides):
    values = dict(
        id=7,
        name="Ada Lovelace",
        email="ada@example.com",
        phone=None,
        company=None,
        message="Hello <script>alert(1)</script>",
        source=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_admin_subject():
    assert admin_subject(_inquiry()) == "New Inquiry: Ada Lovelace"
    assert admin_subject(_inquiry(company="Acme")) == "New Inquiry: Ada Lovelace from Acme"


def test_admin_email_escapes_and_skips_empty_fields():
    html = render_admin_email(_inquiry())
    assert "&lt;script&gt;" in html
    assert "<script>" not in html
    assert "Phone:" not in html
    assert "Company:" not in html
    assert "website" in html

    html = render_admin_email(_inquiry(phone="555-0100", company="Acme"))
    assert "tel:555-0100" in html
    assert "Acme" in html


def test_customer_email_greets_first_name():
    assert "Thank You, Ada!" in render_customer_email(_inquiry())


class _Response:
    def __init__(self, status_code):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_sendgrid_posts_both_emails(monkeypatch):
    calls = []

    def fake_post(url, json, headers, timeout):
        calls.append({"url": url, "json": json, "headers": headers})
        return _Response(202)

    monkeypatch.setattr(notifications.requests, "post", fake_post)
    notifier = SendGridNotifier("SG.key", "noreply@example.com", "admin@example.com")

    assert notifier.send_inquiry_notifications(_inquiry()) is True
    assert [c["json"]["personalizations"][0]["to"][0]["email"] for c in calls] == [
        "admin@example.com",
        "ada@example.com",
    ]
    assert calls[0]["url"] == notifications.SENDGRID_SEND_URL
    assert calls[0]["headers"]["Authorization"] == "Bearer SG.key"
    assert calls[0]["json"]["from"]["email"] == "noreply@example.com"


def test_sendgrid_failure_is_logged_not_raised(monkeypatch, caplog):
    responses = iter([_Response(500), _Response(202)])
    monkeypatch.setattr(notifications.requests, "post", lambda *a, **kw: next(responses))
    notifier = SendGridNotifier("SG.key", "noreply@example.com", "admin@example.com")

    assert notifier.send_inquiry_notifications(_inquiry()) is False
    assert "Email notification error for inquiry 7" in caplog.text


@pytest.mark.parametrize("api_key, expected", [(None, LogNotifier), ("", LogNotifier), ("SG.key", SendGridNotifier)])
def test_build_notifier(api_key, expected):
    assert isinstance(build_notifier(Settings(sendgrid_api_key=api_key)), expected)
