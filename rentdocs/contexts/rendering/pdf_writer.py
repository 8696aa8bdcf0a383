"""PDF output for paginated pages (reportlab canvas, one canvas page per Page)."""

from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence, Union

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from rentdocs.contexts.rendering.geometry import PageGeometry, px_to_pt
from rentdocs.contexts.rendering.paginator import Page


def write_pdf(
    pages: Sequence[Page],
    geometry: PageGeometry,
    title: Optional[str] = None,
    output_path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Draw pages onto a PDF.

    Pages without an image are emitted blank so the page count always matches.

    Args:
        pages: Output of a Paginator
        geometry: Page size and margins (CSS px)
        title: PDF document title
        output_path: Also write the PDF here when given

    Returns:
        The PDF as bytes
    """
    page_width = px_to_pt(geometry.page_size.width)
    page_height = px_to_pt(geometry.page_size.height)

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height))
    if title:
        pdf.setTitle(title)

    for page in pages:
        if page.image is not None:
            # PDF origin is bottom-left
            bottom = page_height - px_to_pt(page.y + page.height)
            pdf.drawImage(
                ImageReader(page.image),
                px_to_pt(page.x),
                bottom,
                width=px_to_pt(page.width),
                height=px_to_pt(page.height),
            )
        pdf.showPage()

    pdf.save()
    data = buffer.getvalue()

    if output_path is not None:
        Path(output_path).write_bytes(data)

    return data
