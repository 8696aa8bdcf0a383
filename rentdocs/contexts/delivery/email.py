"""
Email composition and sending.

Subject and body templates use the same {{token}} grammar as documents and are
resolved with the same resolver. The request is posted as JSON to the email
service at EMAIL_API_URL.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

import requests
from dotenv import load_dotenv

from rentdocs.contexts.delivery.logger import _log_debug, _log_info
from rentdocs.contexts.templating.resolution_context import ResolutionContext
from rentdocs.contexts.templating.resolver import PlaceholderResolver

load_dotenv()
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "")
EMAIL_TIMEOUT_S = float(os.getenv("EMAIL_TIMEOUT_S", "30"))

_EMAIL_SEPARATORS = re.compile(r"[;,]")


@dataclass(frozen=True)
class EmailAddress:
    email: str
    name: str = ""


@dataclass(frozen=True)
class FileAttachment:
    """Attachment with base64-encoded content."""

    file_name: str
    content_type: str
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"fileName": self.file_name, "contentType": self.content_type, "file": self.content}


@dataclass
class EmailRequest:
    """
    One outgoing email.

    Attributes:
        to: Recipients (the first is the named recipient)
        sender: From address
        subject: Resolved subject line
        html_content: Resolved HTML body
        plain_text_content: Plain-text body
        company_name: Sending company, shown by the email service
        attachment: Optional attached document
    """

    to: List[EmailAddress]
    sender: EmailAddress
    subject: str
    html_content: str
    plain_text_content: str = ""
    company_name: Optional[str] = None
    attachment: Optional[FileAttachment] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_attachment(self, attachment: FileAttachment) -> "EmailRequest":
        return EmailRequest(
            to=list(self.to),
            sender=self.sender,
            subject=self.subject,
            html_content=self.html_content,
            plain_text_content=self.plain_text_content,
            company_name=self.company_name,
            attachment=attachment,
            metadata=dict(self.metadata),
        )

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the email service."""
        payload = {
            "toEmail": "; ".join(address.email for address in self.to),
            "toName": self.to[0].name if self.to else "",
            "fromEmail": self.sender.email,
            "fromName": self.sender.name,
            "subject": self.subject,
            "plainTextContent": self.plain_text_content,
            "htmlContent": self.html_content,
            "fileDetails": self.attachment.to_payload() if self.attachment else None,
        }
        if self.company_name:
            payload["companyName"] = self.company_name
        payload.update(self.metadata)
        return payload


def split_email_list(value: Optional[str]) -> List[str]:
    """
    Split a recipient list on ';' or ','.

    >>> split_email_list("a@x.com; b@x.com,c@x.com")
    ['a@x.com', 'b@x.com', 'c@x.com']
    """
    if not value:
        return []
    return [part.strip() for part in _EMAIL_SEPARATORS.split(value) if part.strip()]


def compose_email(
    subject_template: str,
    body_template: str,
    context: Union[ResolutionContext, Mapping[str, str]],
    recipients: Union[str, List[EmailAddress]],
    sender: EmailAddress,
    recipient_name: str = "",
    company_name: Optional[str] = None,
    resolver: Optional[PlaceholderResolver] = None,
) -> EmailRequest:
    """
    Resolve subject and body templates into an EmailRequest.

    Recipient and sender names are added as the highest-precedence layer
    (`toName`, `fromName`, plus `companyName` when given).

    Args:
        subject_template: Subject with {{token}} placeholders
        body_template: HTML body with {{token}} placeholders
        context: Layers (or a flat mapping) for resolution
        recipients: "a@x.com; b@x.com" or EmailAddress list
        sender: From address
        recipient_name: Display name of the first recipient
        company_name: Sending company
    """
    resolver = resolver or PlaceholderResolver()
    if not isinstance(context, ResolutionContext):
        context = ResolutionContext.from_mapping(context)

    if isinstance(recipients, str):
        addresses = split_email_list(recipients)
        recipients = [
            EmailAddress(email=address, name=recipient_name if index == 0 else "")
            for index, address in enumerate(addresses)
        ]

    email_values = {"toName": recipient_name, "fromName": sender.name}
    if company_name is not None:
        email_values["companyName"] = company_name
    context = context.with_layer("email", email_values)

    return EmailRequest(
        to=recipients,
        sender=sender,
        subject=resolver.resolve(subject_template, context).strip(),
        html_content=resolver.resolve(body_template, context),
        company_name=company_name,
    )


class HttpEmailSender:
    """
    Posts email requests to the email service.

    Args:
        api_url: Service endpoint (defaults to EMAIL_API_URL)
        timeout: Request timeout in seconds
        session: Optional requests session

    Raises:
        ValueError: If no endpoint is configured
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: float = EMAIL_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url or EMAIL_API_URL
        if not self.api_url:
            raise ValueError("Email service URL not configured. Set EMAIL_API_URL or pass api_url.")
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, request: EmailRequest) -> Dict[str, Any]:
        """
        Send one email.

        Returns:
            The service's JSON response (empty dict when it returns no body)

        Raises:
            requests.RequestException: On connection or HTTP errors
        """
        _log_info(f"Sending '{request.subject}' to {len(request.to)} recipient(s)")
        response = self.session.post(self.api_url, json=request.to_payload(), timeout=self.timeout)
        response.raise_for_status()
        _log_debug(f"Email service responded {response.status_code}")
        return response.json() if response.content else {}
