"""Generated document file names: {DocumentKind}_{RecordCode}_{ISODate}.pdf"""

from datetime import date
from enum import Enum
from typing import Optional

from rentdocs.utils.formatting import sanitize_record_code
from rentdocs.utils.timestamp import today

DRAFT_RECORD_CODE = "Draft"


class DocumentKind(Enum):
    INVOICE = "Invoice"
    LEASE = "Lease"
    WELCOME_LETTER = "Letter"


def generate_document_file_name(
    kind: DocumentKind,
    record_code: Optional[str],
    on: Optional[date] = None,
) -> str:
    """
    File name for a generated document.

    Example:
        >>> generate_document_file_name(DocumentKind.LEASE, "RES 0042/B", date(2026, 10, 18))
        'Lease_RES0042B_2026-10-18.pdf'

    Codes that sanitize to nothing become "Draft".
    """
    code = sanitize_record_code(record_code) or DRAFT_RECORD_CODE
    return f"{kind.value}_{code}_{today(on)}.pdf"
