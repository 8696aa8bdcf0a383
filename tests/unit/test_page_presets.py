"""Unit tests for page geometry and presets."""

import pytest

from rentdocs.contexts.rendering.geometry import Margins, PageGeometry, PageSize, inches_to_px, px_to_pt
from rentdocs.contexts.rendering.page_presets import (
    LEASE_PRESETS,
    apply_presets,
    list_presets,
    load_page_presets,
    resolve_page_geometry,
)


@pytest.mark.unit
def test_presets_are_flattened():
    presets = load_page_presets()

    assert "size_letter" in presets
    assert "margins_lease" in presets
    assert presets["size_letter"] == {"page": {"width": 816, "height": 1056}}


@pytest.mark.unit
def test_default_geometry_is_letter():
    geometry = resolve_page_geometry()

    assert geometry.page_size == PageSize(816, 1056)
    assert geometry.content_width == 672
    assert geometry.content_height == 912


@pytest.mark.unit
def test_lease_geometry():
    geometry = resolve_page_geometry(LEASE_PRESETS)

    assert geometry.content_height == 936


@pytest.mark.unit
def test_later_presets_override():
    geometry = resolve_page_geometry(["size_letter", "margins_standard", "size_a4", "margins_narrow"])

    assert geometry.page_size == PageSize(794, 1123)
    assert geometry.margins == Margins(48, 48, 48, 48)


@pytest.mark.unit
def test_partial_override_merges():
    config = apply_presets({"margins": {"top": 10, "right": 10, "bottom": 10, "left": 10}}, ["size_letter"])

    assert config["margins"]["top"] == 10
    assert config["page"]["width"] == 816


@pytest.mark.unit
def test_unknown_preset():
    with pytest.raises(ValueError, match="not found"):
        resolve_page_geometry(["size_tabloid"])


@pytest.mark.unit
def test_margins_only_has_no_page_size():
    with pytest.raises(ValueError, match="page size"):
        resolve_page_geometry(["margins_lease"])


@pytest.mark.unit
def test_custom_presets_file(tmp_path):
    config = tmp_path / "presets.yaml"
    config.write_text("size:\n  card:\n    page:\n      width: 480\n      height: 288\n")

    assert list_presets(config) == ["size_card"]
    geometry = resolve_page_geometry(["size_card"], config_path=config)
    assert geometry.content_width == 480


@pytest.mark.unit
def test_geometry_validation():
    with pytest.raises(ValueError):
        PageSize(0, 100)
    with pytest.raises(ValueError):
        Margins(top=-1)
    with pytest.raises(ValueError):
        PageGeometry(PageSize(100, 100), Margins(60, 0, 60, 0))


@pytest.mark.unit
def test_unit_conversions():
    assert px_to_pt(816) == 612
    assert inches_to_px(11) == 1056
