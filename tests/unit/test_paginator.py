"""Unit tests for slicing and placing the measured flow."""

import math

import pytest
from PIL import Image

from rentdocs.contexts.rendering.geometry import Margins, PageGeometry, PageSize
from rentdocs.contexts.rendering.measurer import FlowLayout
from rentdocs.contexts.rendering.paginator import Paginator, RasterPaginator, fit_scale, slice_flow


@pytest.fixture
def geometry():
    # 100 x 100 content area
    return PageGeometry(PageSize(200, 150), Margins(top=25, right=50, bottom=25, left=50))


@pytest.mark.unit
def test_slice_2500_by_1000():
    slices = slice_flow(2500, 1000)

    assert [s.height for s in slices] == [1000, 1000, 500]
    assert [s.top for s in slices] == [0, 1000, 2000]


@pytest.mark.unit
@pytest.mark.parametrize(
    "height, page",
    [(1, 1000), (999.5, 1000), (1000, 1000), (1000.25, 1000), (7321.7, 912), (936 * 4, 936)],
)
def test_slices_cover_flow_exactly(height, page):
    slices = slice_flow(height, page)

    assert len(slices) == math.ceil(height / page)
    assert sum(s.height for s in slices) == pytest.approx(height)
    for previous, current in zip(slices, slices[1:]):
        assert current.top == pytest.approx(previous.bottom)
    assert all(0 < s.height <= page for s in slices)


@pytest.mark.unit
def test_float_noise_does_not_add_page():
    assert len(slice_flow(3000.0000000001, 1000)) == 3


@pytest.mark.unit
def test_empty_flow_has_no_slices():
    assert slice_flow(0, 1000) == []


@pytest.mark.unit
def test_slice_needs_positive_page_height():
    with pytest.raises(ValueError):
        slice_flow(100, 0)


@pytest.mark.unit
def test_fit_scale_never_enlarges():
    assert fit_scale(50, 100) == 1.0
    assert fit_scale(200, 100) == 0.5
    assert fit_scale(0, 100) == 1.0


@pytest.mark.unit
def test_narrow_flow_is_centered(geometry):
    pages = Paginator().paginate(FlowLayout(height=250, width=50), geometry)

    assert [p.height for p in pages] == [100, 100, 50]
    assert all(p.x == 75 and p.y == 25 and p.width == 50 for p in pages)
    assert all(p.image is None for p in pages)
    assert [p.number for p in pages] == [1, 2, 3]


@pytest.mark.unit
def test_wide_flow_is_scaled_down(geometry):
    pages = Paginator().paginate(FlowLayout(height=400, width=200), geometry)

    # 400px of flow at half scale fills exactly two 100px pages
    assert len(pages) == 2
    assert all(p.width == 100 and p.x == 50 for p in pages)


@pytest.mark.unit
def test_raster_is_cropped_per_slice(geometry):
    raster = Image.new("RGB", (100, 500), "white")
    layout = FlowLayout(height=250, width=50, raster=raster)

    pages = RasterPaginator().paginate(layout, geometry)

    assert [p.image.size for p in pages] == [(100, 200), (100, 200), (100, 100)]


@pytest.mark.unit
def test_raster_crop_on_scaled_flow(geometry):
    raster = Image.new("RGB", (200, 400), "white")
    layout = FlowLayout(height=400, width=200, raster=raster)

    pages = RasterPaginator().paginate(layout, geometry)

    assert [p.image.size for p in pages] == [(200, 200), (200, 200)]


@pytest.mark.unit
def test_raster_paginator_without_raster(geometry):
    pages = RasterPaginator().paginate(FlowLayout(height=150, width=100), geometry)

    assert len(pages) == 2
    assert all(p.image is None for p in pages)
