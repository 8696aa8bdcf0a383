"""
Rendering Context

Responsibilities:
- Resolves page geometry from named presets
- Measures the flow height of the print-ready page (real or synthetic layout)
- Slices the flow into physical pages and writes them to PDF

Owns: Page geometry, flow measurement, slicing invariants, PDF output
Never: Resolves placeholders, merges documents, or delivers artifacts
"""

from rentdocs.contexts.rendering.exceptions import RenderingError
from rentdocs.contexts.rendering.geometry import Margins, PageGeometry, PageSize, px_to_pt
from rentdocs.contexts.rendering.measurer import (
    ChromiumFlowMeasurer,
    FlowLayout,
    FlowMeasurer,
    SyntheticFlowMeasurer,
)
from rentdocs.contexts.rendering.page_presets import (
    DEFAULT_PRESETS,
    LEASE_PRESETS,
    apply_presets,
    list_presets,
    resolve_page_geometry,
)
from rentdocs.contexts.rendering.paginator import Page, PageSlice, Paginator, RasterPaginator, slice_flow
from rentdocs.contexts.rendering.pdf_writer import write_pdf
from rentdocs.contexts.rendering.renderer import PaginatedRenderer, RenderedArtifact

__all__ = [
    "PaginatedRenderer",
    "RenderedArtifact",
    "RenderingError",
    "PageSize",
    "Margins",
    "PageGeometry",
    "px_to_pt",
    "FlowLayout",
    "FlowMeasurer",
    "ChromiumFlowMeasurer",
    "SyntheticFlowMeasurer",
    "Page",
    "PageSlice",
    "Paginator",
    "RasterPaginator",
    "slice_flow",
    "write_pdf",
    "DEFAULT_PRESETS",
    "LEASE_PRESETS",
    "apply_presets",
    "list_presets",
    "resolve_page_geometry",
]
