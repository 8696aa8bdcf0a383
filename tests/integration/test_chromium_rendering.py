"""
Integration tests for rendering with headless Chromium (Playwright).
"""

from pathlib import Path

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from rentdocs.contexts.assembly.merger import ResolvedDocument, merge
from rentdocs.contexts.assembly.print_styles import PrintStyleOptions, apply_print_styles
from rentdocs.contexts.orchestration.orchestrator import DocumentPipeline, DocumentRequest, RequestState
from rentdocs.contexts.rendering.geometry import Margins, PageGeometry, PageSize
from rentdocs.contexts.rendering.measurer import ChromiumFlowMeasurer
from rentdocs.contexts.rendering.renderer import PaginatedRenderer
from rentdocs.contexts.templating.context_files import load_context_file
from rentdocs.contexts.templating.template_store import AssetTemplateStore
from rentdocs.utils.pdf_processing import page_count

ASSETS_PATH = Path(__file__).resolve().parents[2] / "assets"


def _chromium_available() -> bool:
    try:
        with sync_playwright() as p:
            p.chromium.launch().close()
    except PlaywrightError:
        return False
    return True


# Check if a Playwright Chromium build is installed
skip_if_no_chromium = pytest.mark.skipif(
    not _chromium_available(),
    reason="Chromium not installed - run `playwright install chromium`",
)

LETTER = PageSize(816, 1056)
# 1000px content height
MARGINS = Margins(top=28, right=72, bottom=28, left=72)


def tall_block(height_px: int) -> str:
    return f'<div style="height: {height_px}px; background: #eee"></div>'


@pytest.mark.integration
@pytest.mark.chromium
@skip_if_no_chromium
def test_measures_flow_height():
    html = f"<html><body style='margin:0'>{tall_block(2500)}</body></html>"

    layout = ChromiumFlowMeasurer().measure(html, PageGeometry(LETTER, MARGINS))

    assert layout.height == pytest.approx(2500, abs=1)
    assert layout.raster is not None
    assert layout.raster.height == pytest.approx(2500 * layout.raster_scale, abs=4)


@pytest.mark.integration
@pytest.mark.chromium
@skip_if_no_chromium
def test_merged_documents_start_on_new_pages():
    merged = merge(
        [
            ResolvedDocument("lease", f"<html><body>{tall_block(300)}</body></html>"),
            ResolvedDocument("welcome_letter", f"<html><body>{tall_block(300)}</body></html>"),
        ]
    )
    page_html = apply_print_styles(merged, PrintStyleOptions())

    artifact = PaginatedRenderer(ChromiumFlowMeasurer()).render(page_html, LETTER, MARGINS)

    assert artifact.page_count == 2
    assert page_count(artifact.to_pdf()) == 2


@pytest.mark.integration
@pytest.mark.chromium
@skip_if_no_chromium
def test_broken_image_does_not_block_rendering():
    html = (
        "<html><body>"
        '<img src="http://127.0.0.1:9/missing.png" style="width:100px;height:100px">'
        f"{tall_block(200)}</body></html>"
    )

    artifact = PaginatedRenderer(ChromiumFlowMeasurer(image_timeout_ms=500)).render(html, LETTER, MARGINS)

    assert artifact.page_count == 1


@pytest.mark.integration
@pytest.mark.chromium
@skip_if_no_chromium
def test_sample_lease_end_to_end(tmp_path):
    context, predicates = load_context_file(ASSETS_PATH / "contexts" / "sample_lease.yaml")
    pipeline = DocumentPipeline(
        store=AssetTemplateStore(ASSETS_PATH / "templates"),
        measurer=ChromiumFlowMeasurer(),
        events_file=tmp_path / "events.log",
    )

    result = pipeline.generate(
        DocumentRequest(
            ["lease", "welcome_letter"],
            context,
            "Lease_R-1042_2026-10-18.pdf",
            predicates=predicates,
            print_options=PrintStyleOptions.for_lease(),
        )
    )

    assert result.state is RequestState.COMPLETE, result.error
    assert result.artifact.page_count >= 2
    assert "Security Deposit Waiver" in result.resolutions["lease"].text
