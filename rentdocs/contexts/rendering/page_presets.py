"""
Page Geometry Presets

Named page-size and margin presets, composable in order: later presets override
earlier ones.

Examples:
    # Letter paper with standard margins
    >>> resolve_page_geometry(["size_letter", "margins_standard"])

    # Lease layout on A4
    >>> resolve_page_geometry(["size_a4", "margins_lease"])
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Sequence

from dotenv import load_dotenv
from omegaconf import OmegaConf

from rentdocs.contexts.rendering.geometry import Margins, PageGeometry, PageSize

load_dotenv()
PAGE_PRESETS_PATH = Path(
    os.getenv("PAGE_PRESETS_PATH", str(Path(__file__).parent / "page_presets.yaml"))
)

DEFAULT_PRESETS = ("size_letter", "margins_standard")
LEASE_PRESETS = ("size_letter", "margins_lease")


def load_page_presets(config_path: Path = None) -> Dict[str, Any]:
    """
    Load page_presets.yaml and flatten to single-level dict.

    Collapses nested structure: margins.lease -> margins_lease

    Args:
        config_path: Optional path to presets file (defaults to PAGE_PRESETS_PATH)

    Returns:
        Flattened dict mapping preset names to configs
        Example: {"size_letter": {"page": {...}}, "margins_lease": {"margins": {...}}}
    """
    if config_path is None:
        config_path = PAGE_PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, config in presets.items():
            flattened[f"{category}_{name}"] = config

    return flattened


def apply_presets(
    geometry: Dict[str, Any],
    preset_names: Sequence[str],
    config_path: Path = None,
) -> Dict[str, Any]:
    """
    Apply named presets to a geometry config.

    Presets are applied in order, with later presets overriding earlier ones.
    Nested keys merge, so a preset may override a single margin.

    Args:
        geometry: Starting config ({"page": {...}, "margins": {...}}, possibly empty)
        preset_names: Preset names to apply (e.g., ["size_a4", "margins_narrow"])
        config_path: Optional path to presets file

    Returns:
        New geometry config with presets applied

    Raises:
        ValueError: If a preset is not found
    """
    presets = load_page_presets(config_path)

    merged = OmegaConf.create(geometry)
    for preset_name in preset_names:
        if preset_name not in presets:
            available = sorted(presets.keys())
            raise ValueError(f"Preset '{preset_name}' not found. Available presets: {available}")
        merged = OmegaConf.merge(merged, presets[preset_name])

    return OmegaConf.to_container(merged, resolve=True)


def resolve_page_geometry(
    preset_names: Sequence[str] = DEFAULT_PRESETS,
    config_path: Path = None,
) -> PageGeometry:
    """
    Build a PageGeometry from presets.

    Raises:
        ValueError: If a preset is missing or the result lacks a page size
    """
    config = apply_presets({}, preset_names, config_path)
    if "page" not in config:
        raise ValueError(f"Presets {list(preset_names)} do not define a page size")

    page = config["page"]
    margins = config.get("margins", {})
    return PageGeometry(
        page_size=PageSize(width=float(page["width"]), height=float(page["height"])),
        margins=Margins(**{side: float(value) for side, value in margins.items()}),
    )


def list_presets(config_path: Path = None) -> List[str]:
    return sorted(load_page_presets(config_path).keys())
