"""
Page geometry in CSS pixels (96 per inch).

Layout, measurement and slicing all work in CSS px; the PDF writer converts to
points only when it places pages.
"""

from dataclasses import dataclass, field

CSS_PX_PER_INCH = 96
PT_PER_PX = 72 / CSS_PX_PER_INCH


@dataclass(frozen=True)
class PageSize:
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Page size must be positive, got {self.width}x{self.height}")


@dataclass(frozen=True)
class Margins:
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    def __post_init__(self):
        if min(self.top, self.right, self.bottom, self.left) < 0:
            raise ValueError(f"Margins must not be negative: {self}")


@dataclass(frozen=True)
class PageGeometry:
    """
    A physical page and its margins.

    Raises:
        ValueError: If the margins leave no content area
    """

    page_size: PageSize
    margins: Margins = field(default_factory=Margins)

    def __post_init__(self):
        if self.content_width <= 0 or self.content_height <= 0:
            raise ValueError(
                f"Margins {self.margins} leave no content area on a "
                f"{self.page_size.width}x{self.page_size.height} page"
            )

    @property
    def content_width(self) -> float:
        return self.page_size.width - self.margins.left - self.margins.right

    @property
    def content_height(self) -> float:
        return self.page_size.height - self.margins.top - self.margins.bottom


def px_to_pt(value: float) -> float:
    return value * PT_PER_PX


def inches_to_px(value: float) -> float:
    return value * CSS_PX_PER_INCH
