"""Unit tests for PDF output."""

import pytest
from PIL import Image

from rentdocs.contexts.rendering.geometry import Margins, PageGeometry, PageSize
from rentdocs.contexts.rendering.measurer import FlowLayout
from rentdocs.contexts.rendering.paginator import RasterPaginator
from rentdocs.contexts.rendering.pdf_writer import write_pdf
from rentdocs.utils.pdf_processing import page_count, page_dimensions


@pytest.fixture
def geometry():
    return PageGeometry(PageSize(794, 1123), Margins(48, 48, 48, 48))


@pytest.mark.unit
def test_write_pdf_to_path(tmp_path, geometry):
    raster = Image.new("RGB", (698, 2000), "white")
    pages = RasterPaginator().paginate(FlowLayout(height=2000, width=698, raster=raster), geometry)
    output = tmp_path / "Letter_R1_2026-10-18.pdf"

    data = write_pdf(pages, geometry, title="Letter_R1_2026-10-18.pdf", output_path=output)

    assert output.read_bytes() == data
    assert page_count(output) == 2
    assert page_dimensions(output) == pytest.approx((595.5, 842.25))
