"""Unit tests for email composition and sending."""

import pytest
import requests

from rentdocs.contexts.delivery.email import (
    EmailAddress,
    FileAttachment,
    HttpEmailSender,
    compose_email,
    split_email_list,
)
from rentdocs.contexts.templating.resolution_context import ResolutionContext


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.content = b"{}" if payload is not None else b""

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        return self.response


SENDER = EmailAddress("office@harbor.example", "Harbor Office")


@pytest.mark.unit
def test_split_email_list():
    assert split_email_list("a@x.com; b@x.com,c@x.com ,") == ["a@x.com", "b@x.com", "c@x.com"]
    assert split_email_list(None) == []


@pytest.mark.unit
def test_compose_email_resolves_templates():
    context = ResolutionContext.from_mapping({"reservationCode": "R-1042"})

    request = compose_email(
        subject_template=" Your lease {{reservationCode}} ",
        body_template="<p>Hi {{toName}}, call {{companyName}}.</p>",
        context=context,
        recipients="ada@example.com; billing@example.com",
        sender=SENDER,
        recipient_name="Ada Lovelace",
        company_name="Harbor Rentals",
    )

    assert request.subject == "Your lease R-1042"
    assert request.html_content == "<p>Hi Ada Lovelace, call Harbor Rentals.</p>"
    assert [a.email for a in request.to] == ["ada@example.com", "billing@example.com"]
    assert request.to[0].name == "Ada Lovelace"


@pytest.mark.unit
def test_payload_field_names():
    request = compose_email("S", "B", {}, "ada@example.com", SENDER, recipient_name="Ada")
    request = request.with_attachment(FileAttachment("Lease_R1.pdf", "application/pdf", "JVBERi0="))

    payload = request.to_payload()

    assert payload["toEmail"] == "ada@example.com"
    assert payload["toName"] == "Ada"
    assert payload["fromName"] == "Harbor Office"
    assert payload["fileDetails"] == {
        "fileName": "Lease_R1.pdf",
        "contentType": "application/pdf",
        "file": "JVBERi0=",
    }
    assert "companyName" not in payload


@pytest.mark.unit
def test_sender_posts_json():
    session = FakeSession(FakeResponse({"emailStatusId": 1}))
    sender = HttpEmailSender("https://api.example/email/", session=session)
    request = compose_email("S", "B", {}, "ada@example.com", SENDER)

    response = sender.send(request)

    assert response == {"emailStatusId": 1}
    url, body, timeout = session.calls[0]
    assert url == "https://api.example/email/"
    assert body["subject"] == "S"
    assert timeout is not None


@pytest.mark.unit
def test_sender_raises_http_errors():
    sender = HttpEmailSender("https://api.example/email/", session=FakeSession(FakeResponse(status_code=500)))

    with pytest.raises(requests.HTTPError):
        sender.send(compose_email("S", "B", {}, "ada@example.com", SENDER))


@pytest.mark.unit
def test_sender_requires_url(monkeypatch):
    monkeypatch.setattr("rentdocs.contexts.delivery.email.EMAIL_API_URL", "")

    with pytest.raises(ValueError):
        HttpEmailSender()
