"""
Paginated Renderer

Lays the print-ready page out at the content width, measures its flow height,
and slices it into physical pages.

Invariants:
- pages == ceil(H / C) for scaled flow height H and content height C
- slices are contiguous, never overlap, and sum to H
- the written PDF has exactly one page per slice
"""

import math
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from dotenv import load_dotenv

from rentdocs.contexts.assembly.merger import MergedDocument
from rentdocs.contexts.rendering.exceptions import RenderingError
from rentdocs.contexts.rendering.geometry import Margins, PageGeometry, PageSize
from rentdocs.contexts.rendering.logger import (
    _log_warning,
    log_flow_measured,
    log_render_result,
    log_render_start,
)
from rentdocs.contexts.rendering.measurer import ChromiumFlowMeasurer, FlowLayout, FlowMeasurer
from rentdocs.contexts.rendering.paginator import (
    Page,
    Paginator,
    RasterPaginator,
    fit_scale,
    page_count,
)
from rentdocs.contexts.rendering.pdf_writer import write_pdf
from rentdocs.utils.pdf_processing import page_count as pdf_page_count

load_dotenv()
_fallback = os.getenv("FALLBACK_FLOW_HEIGHT")
FALLBACK_FLOW_HEIGHT = float(_fallback) if _fallback else None

# Allowed drift between the slice total and the flow height
SLICE_TOLERANCE_PX = 0.5


@dataclass
class RenderedArtifact:
    """
    Ordered pages of one rendered document.

    Attributes:
        pages: Pages in slice order
        geometry: Page size and margins the pages were cut for
        file_name: Requested output file name
        flow_height: Scaled flow height the pages cover
        scale: Scale applied to fit the content width (<= 1)
    """

    pages: List[Page]
    geometry: PageGeometry
    file_name: str
    flow_height: float
    scale: float = 1.0
    _pdf: Optional[bytes] = field(default=None, repr=False)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def page_size(self) -> PageSize:
        return self.geometry.page_size

    @property
    def physical_size(self) -> Tuple[float, float]:
        """Total size of all pages stacked, in CSS px."""
        return (self.page_size.width, self.page_size.height * self.page_count)

    def to_pdf(self) -> bytes:
        """PDF bytes for the artifact (written during render, then cached)."""
        if self._pdf is None:
            self._pdf = write_pdf(self.pages, self.geometry, title=self.file_name)
        return self._pdf


class PaginatedRenderer:
    """
    Renders merged documents into paginated artifacts.

    Args:
        measurer: Flow measurer (defaults to headless Chromium)
        paginator: Slice placement (defaults to raster cropping)
        fallback_flow_height: Height to use when the measured flow is empty;
            None makes an empty flow a RenderingError

    Example:
        renderer = PaginatedRenderer(SyntheticFlowMeasurer(2500))
        artifact = renderer.render(merged, PageSize(816, 1056), Margins(48, 72, 96, 72))
    """

    def __init__(
        self,
        measurer: Optional[FlowMeasurer] = None,
        paginator: Optional[Paginator] = None,
        fallback_flow_height: Optional[float] = FALLBACK_FLOW_HEIGHT,
    ):
        self.measurer = measurer or ChromiumFlowMeasurer()
        self.paginator = paginator or RasterPaginator()
        self.fallback_flow_height = fallback_flow_height

    def render(
        self,
        merged: Union[MergedDocument, str],
        page_size: PageSize,
        margins: Margins,
        file_name: str = "document.pdf",
    ) -> RenderedArtifact:
        """
        Render a merged document (or print-ready markup) into pages.

        Raises:
            ValueError: If the margins leave no content area
            RenderingError: If measurement fails, the flow has no height, or the
                PDF cannot be written with one page per slice
        """
        geometry = PageGeometry(page_size=page_size, margins=margins)
        html = merged.html if isinstance(merged, MergedDocument) else merged

        start_time = time.time()
        log_render_start(file_name, geometry, self.measurer.name)

        layout = self._measure(html, geometry)
        scale = fit_scale(layout.width, geometry.content_width)
        log_flow_measured(layout, scale)

        pages = self.paginator.paginate(layout, geometry)
        flow_height = layout.height * scale
        self._check_slices(pages, flow_height, geometry.content_height)

        artifact = RenderedArtifact(
            pages=pages,
            geometry=geometry,
            file_name=file_name,
            flow_height=flow_height,
            scale=scale,
        )
        self._write(artifact)
        log_render_result(artifact, time.time() - start_time)
        return artifact

    def _measure(self, html: str, geometry: PageGeometry) -> FlowLayout:
        layout = self.measurer.measure(html, geometry)
        if layout.height > 0:
            return layout

        if self.fallback_flow_height:
            _log_warning(
                f"Measured flow height {layout.height}; using fallback of {self.fallback_flow_height}px"
            )
            layout.height = self.fallback_flow_height
            return layout

        raise RenderingError(
            "Document has no measurable height",
            stage="measure",
            flow_height=layout.height,
        )

    @staticmethod
    def _write(artifact: RenderedArtifact) -> None:
        try:
            pdf = artifact.to_pdf()
        except Exception as e:
            raise RenderingError(
                "Could not write the PDF",
                stage="write",
                flow_height=artifact.flow_height,
                original_error=e,
            ) from e

        written = pdf_page_count(pdf)
        if written != artifact.page_count:
            raise RenderingError(
                f"PDF has {written} page(s), expected {artifact.page_count}",
                stage="write",
                flow_height=artifact.flow_height,
            )

    @staticmethod
    def _check_slices(pages: List[Page], flow_height: float, content_height: float) -> None:
        expected = page_count(flow_height, content_height)
        if len(pages) != expected:
            raise RenderingError(
                f"Paginator produced {len(pages)} page(s), expected {expected}",
                stage="paginate",
                flow_height=flow_height,
            )

        covered = 0.0
        for page in pages:
            if not math.isclose(page.slice.top, covered, abs_tol=SLICE_TOLERANCE_PX):
                raise RenderingError(
                    f"Page {page.number} starts at {page.slice.top}px, previous slice ended at {covered}px",
                    stage="paginate",
                    flow_height=flow_height,
                )
            covered = page.slice.bottom

        if abs(covered - flow_height) > SLICE_TOLERANCE_PX:
            raise RenderingError(
                f"Slices cover {covered}px of a {flow_height}px flow",
                stage="paginate",
                flow_height=flow_height,
            )
