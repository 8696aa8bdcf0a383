"""PDF inspection helpers for generated artifacts."""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PyPDF2 import PdfReader


def page_count(pdf: Union[Path, str, bytes]) -> Optional[int]:
    """Get page count from a PDF path or in-memory PDF bytes, or None if unreadable."""
    try:
        source = BytesIO(pdf) if isinstance(pdf, (bytes, bytearray)) else str(pdf)
        reader = PdfReader(source)
        return len(reader.pages)
    except Exception:
        return None


def page_dimensions(pdf: Union[Path, str, bytes], page_number: int = 1) -> Optional[tuple]:
    """
    Get (width, height) in PDF points for a 1-indexed page, or None if unreadable.
    """
    try:
        source = BytesIO(pdf) if isinstance(pdf, (bytes, bytearray)) else str(pdf)
        reader = PdfReader(source)
        box = reader.pages[page_number - 1].mediabox
        return float(box.width), float(box.height)
    except Exception:
        return None
