"""
Pagination of a measured flow.

The flow is scaled to fit the content width (never enlarged) and cut into
slices of the content height. Slices are contiguous and their heights sum to
the scaled flow height: nothing is dropped and nothing is drawn twice.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

from PIL import Image

from rentdocs.contexts.rendering.geometry import PageGeometry
from rentdocs.contexts.rendering.measurer import FlowLayout

# Float noise below this many px never creates an extra page
PAGE_COUNT_PRECISION = 6


@dataclass(frozen=True)
class PageSlice:
    """Vertical span of the scaled flow, in CSS px."""

    index: int
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass
class Page:
    """
    One physical page.

    Attributes:
        slice: Span of the scaled flow shown on this page
        x, y: Top-left of the drawn slice, from the page's top-left corner
        width, height: Drawn size of the slice
        image: Raster of the slice (None when the flow was not captured)
    """

    slice: PageSlice
    x: float
    y: float
    width: float
    height: float
    image: Optional[Image.Image] = None

    @property
    def number(self) -> int:
        return self.slice.index + 1


def fit_scale(flow_width: float, content_width: float) -> float:
    """Scale that fits the flow into the content width, capped at 1."""
    if flow_width <= 0:
        return 1.0
    return min(1.0, content_width / flow_width)


def page_count(total_height: float, page_height: float) -> int:
    if total_height <= 0:
        return 0
    return math.ceil(round(total_height / page_height, PAGE_COUNT_PRECISION))


def slice_flow(total_height: float, page_height: float) -> List[PageSlice]:
    """
    Cut a flow of `total_height` into page-height slices.

    Example:
        >>> [s.height for s in slice_flow(2500, 1000)]
        [1000, 1000, 500]

    Raises:
        ValueError: If page_height is not positive
    """
    if page_height <= 0:
        raise ValueError(f"Page height must be positive, got {page_height}")

    slices = []
    for index in range(page_count(total_height, page_height)):
        top = index * page_height
        bottom = min(top + page_height, total_height)
        slices.append(PageSlice(index=index, top=top, height=bottom - top))
    return slices


class Paginator:
    """
    Places flow slices on pages, centered horizontally within the margins.

    The base paginator draws no content; RasterPaginator crops the captured
    raster for each slice.
    """

    def paginate(self, layout: FlowLayout, geometry: PageGeometry) -> List[Page]:
        scale = fit_scale(layout.width, geometry.content_width)
        drawn_width = layout.width * scale
        x = geometry.margins.left + (geometry.content_width - drawn_width) / 2

        pages = []
        for page_slice in slice_flow(layout.height * scale, geometry.content_height):
            pages.append(
                Page(
                    slice=page_slice,
                    x=x,
                    y=geometry.margins.top,
                    width=drawn_width,
                    height=page_slice.height,
                    image=self.slice_image(layout, page_slice, scale),
                )
            )
        return pages

    def slice_image(self, layout: FlowLayout, page_slice: PageSlice, scale: float) -> Optional[Image.Image]:
        return None


class RasterPaginator(Paginator):
    """Crops the measured raster so each page shows exactly its slice."""

    def slice_image(self, layout: FlowLayout, page_slice: PageSlice, scale: float) -> Optional[Image.Image]:
        if layout.raster is None:
            return None

        # Slice bounds are in scaled px; the raster is in natural px times raster_scale
        factor = layout.raster_scale / scale
        raster_height = layout.raster.height
        top = min(round(page_slice.top * factor), raster_height)
        bottom = min(round(page_slice.bottom * factor), raster_height)
        if bottom <= top:
            return None
        return layout.raster.crop((0, top, layout.raster.width, bottom))
