"""Unit tests for generated document file names."""

from datetime import date

import pytest

from rentdocs.contexts.delivery.file_naming import DocumentKind, generate_document_file_name

ON = date(2026, 10, 18)


@pytest.mark.unit
@pytest.mark.parametrize(
    "kind, code, expected",
    [
        (DocumentKind.LEASE, "R-1042", "Lease_R-1042_2026-10-18.pdf"),
        (DocumentKind.WELCOME_LETTER, "R-1042", "Letter_R-1042_2026-10-18.pdf"),
        (DocumentKind.INVOICE, "INV 2026/07", "Invoice_INV202607_2026-10-18.pdf"),
    ],
)
def test_file_name_convention(kind, code, expected):
    assert generate_document_file_name(kind, code, on=ON) == expected


@pytest.mark.unit
@pytest.mark.parametrize("code", [None, "", "///"])
def test_missing_code_becomes_draft(code):
    assert generate_document_file_name(DocumentKind.LEASE, code, on=ON) == "Lease_Draft_2026-10-18.pdf"
