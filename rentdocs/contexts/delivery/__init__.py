"""
Delivery Context

Responsibilities:
- Names generated documents ({DocumentKind}_{RecordCode}_{ISODate}.pdf)
- Hands a rendered artifact to one sink: download, print, or email attachment
- Composes and sends document emails

Owns: File naming, sinks, email requests
Never: Builds or modifies the artifact it delivers
"""

from rentdocs.contexts.delivery.email import (
    EmailAddress,
    EmailRequest,
    FileAttachment,
    HttpEmailSender,
    compose_email,
    split_email_list,
)
from rentdocs.contexts.delivery.exceptions import SinkError
from rentdocs.contexts.delivery.file_naming import DocumentKind, generate_document_file_name
from rentdocs.contexts.delivery.sinks import (
    DeliveryReceipt,
    DocumentSink,
    DownloadSink,
    EmailSink,
    PrintSink,
)

__all__ = [
    "DocumentKind",
    "generate_document_file_name",
    "DocumentSink",
    "DownloadSink",
    "PrintSink",
    "EmailSink",
    "DeliveryReceipt",
    "SinkError",
    "EmailAddress",
    "EmailRequest",
    "FileAttachment",
    "HttpEmailSender",
    "compose_email",
    "split_email_list",
]
