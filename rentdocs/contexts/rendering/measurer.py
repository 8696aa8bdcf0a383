"""
Flow measurers.

A FlowMeasurer lays the print-ready page out at the content width with
unconstrained height and reports the total flow height. The Chromium measurer
uses a real layout engine (Playwright) and also captures a raster of the flow;
the synthetic measurer computes the height from a deterministic function and
captures nothing.
"""

import math
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Optional, Union

from dotenv import load_dotenv
from PIL import Image
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from rentdocs.contexts.rendering.exceptions import RenderingError
from rentdocs.contexts.rendering.geometry import PageGeometry
from rentdocs.contexts.rendering.logger import _log_debug

load_dotenv()
IMAGE_LOAD_TIMEOUT_MS = int(os.getenv("IMAGE_LOAD_TIMEOUT_MS", "3000"))
RENDER_DEVICE_SCALE = float(os.getenv("RENDER_DEVICE_SCALE", "2"))

# Resolves to the number of images still loading when their timer ran out
WAIT_FOR_IMAGES_JS = """
async (timeoutMs) => {
  const waits = Array.from(document.images).map((img) => {
    if (img.complete) return Promise.resolve(false);
    return new Promise((resolve) => {
      const timer = setTimeout(() => resolve(true), timeoutMs);
      const done = () => { clearTimeout(timer); resolve(false); };
      img.addEventListener('load', done, { once: true });
      img.addEventListener('error', done, { once: true });
    });
  });
  const timedOut = await Promise.all(waits);
  if (document.fonts) await document.fonts.ready;
  return timedOut.filter(Boolean).length;
}
"""

# Grows each page-break marker so the following content starts on a page boundary
ALIGN_PAGE_BREAKS_JS = """
(chunk) => {
  const markers = Array.from(document.querySelectorAll('p.breakhere'));
  for (const marker of markers) {
    marker.style.setProperty('display', 'block', 'important');
    marker.style.setProperty('height', '0px', 'important');
    const top = marker.getBoundingClientRect().top + window.scrollY;
    const offset = top % chunk;
    if (offset > 0.5 && chunk - offset > 0.5) {
      marker.style.setProperty('height', (chunk - offset) + 'px', 'important');
    }
  }
  return markers.length;
}
"""

FLOW_WIDTH_JS = "() => Math.ceil(document.documentElement.scrollWidth)"
FLOW_HEIGHT_JS = "() => document.documentElement.getBoundingClientRect().height"


@dataclass
class FlowLayout:
    """
    Measured flow of one print-ready page.

    Attributes:
        height: Total flow height in CSS px at natural size
        width: Natural flow width in CSS px
        raster: Captured image of the whole flow (None when not captured)
        timed_out_images: Images that had not loaded when measurement went ahead
        page_break_count: Page-break markers found in the flow
    """

    height: float
    width: float
    raster: Optional[Image.Image] = None
    timed_out_images: int = 0
    page_break_count: int = 0

    @property
    def raster_scale(self) -> float:
        """Raster pixels per CSS px."""
        if self.raster is None or self.height <= 0:
            return 1.0
        return self.raster.height / self.height


class FlowMeasurer(ABC):
    """Lays out markup at the page's content width and measures it."""

    name = "measurer"

    @abstractmethod
    def measure(self, html: str, geometry: PageGeometry) -> FlowLayout:
        """
        Measure the flow of `html`.

        Raises:
            RenderingError: If the layout engine fails
        """


class SyntheticFlowMeasurer(FlowMeasurer):
    """
    Deterministic measurer for tests and dry runs.

    Args:
        flow_height: Fixed height, or a function of the markup returning one
        flow_width: Natural width (defaults to the content width)

    Example:
        >>> measurer = SyntheticFlowMeasurer(lambda html: 10.0 * len(html))
    """

    name = "synthetic"

    def __init__(
        self,
        flow_height: Union[float, Callable[[str], float]],
        flow_width: Optional[float] = None,
    ):
        self.flow_height = flow_height
        self.flow_width = flow_width

    def measure(self, html: str, geometry: PageGeometry) -> FlowLayout:
        height = self.flow_height(html) if callable(self.flow_height) else self.flow_height
        width = self.flow_width if self.flow_width is not None else geometry.content_width
        return FlowLayout(height=float(height), width=float(width))


class ChromiumFlowMeasurer(FlowMeasurer):
    """
    Measures with headless Chromium through Playwright.

    Each embedded image gets up to `image_timeout_ms` to load (or fail); after
    that measurement proceeds with the image in whatever state it is.

    Args:
        image_timeout_ms: Per-image load wait
        device_scale: Raster pixels per CSS px
        align_page_breaks: Pad page-break markers so each merged document
            starts on a new page
        capture: Capture a raster of the flow for the paginator
    """

    name = "chromium"

    def __init__(
        self,
        image_timeout_ms: int = IMAGE_LOAD_TIMEOUT_MS,
        device_scale: float = RENDER_DEVICE_SCALE,
        align_page_breaks: bool = True,
        capture: bool = True,
    ):
        self.image_timeout_ms = image_timeout_ms
        self.device_scale = device_scale
        self.align_page_breaks = align_page_breaks
        self.capture = capture

    def measure(self, html: str, geometry: PageGeometry) -> FlowLayout:
        viewport = {
            "width": math.ceil(geometry.content_width),
            "height": math.ceil(geometry.content_height),
        }
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch()
                try:
                    page = browser.new_page(viewport=viewport, device_scale_factor=self.device_scale)
                    page.set_content(html, wait_until="domcontentloaded")
                    timed_out = page.evaluate(WAIT_FOR_IMAGES_JS, self.image_timeout_ms)

                    width = page.evaluate(FLOW_WIDTH_JS)
                    markers = 0
                    if self.align_page_breaks:
                        # Content wider than the page is scaled down, so a page holds more flow
                        scale = min(1.0, geometry.content_width / width) if width else 1.0
                        markers = page.evaluate(ALIGN_PAGE_BREAKS_JS, geometry.content_height / scale)

                    height = page.evaluate(FLOW_HEIGHT_JS)
                    _log_debug(f"Chromium flow: {width}x{height:.1f}px, {markers} page break(s)")

                    raster = None
                    if self.capture and height > 0:
                        png = page.screenshot(
                            full_page=True,
                            clip={"x": 0, "y": 0, "width": width, "height": math.ceil(height)},
                            type="png",
                        )
                        raster = Image.open(BytesIO(png))
                        raster.load()
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise RenderingError(
                "Layout engine failed while measuring the document",
                stage="measure",
                original_error=e,
            ) from e

        return FlowLayout(
            height=float(height),
            width=float(width),
            raster=raster,
            timed_out_images=int(timed_out),
            page_break_count=int(markers),
        )
