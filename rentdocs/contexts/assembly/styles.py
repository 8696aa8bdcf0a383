"""
Style fragment extraction and consolidation.

Every <style> block of a source document becomes a StyleFragment tagged with
the document's position (origin). Consolidation concatenates fragments in
origin order, so rules from later documents win on equal specificity.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple

STYLE_BLOCK_PATTERN = re.compile(r"<style[^>]*>([\s\S]*?)</style>", re.IGNORECASE)

# Light gray text is unreadable when printed
COLOR_NORMALIZATIONS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"color:\s*#ccc\s*;", re.IGNORECASE), "color: #000 !important;"),
    (re.compile(r"color:\s*#999\s*;", re.IGNORECASE), "color: #000 !important;"),
)

FRAGMENT_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class StyleFragment:
    """CSS text from one <style> block and the index of its source document."""

    origin: int
    css: str


def normalize_css(css: str) -> str:
    """Rewrite the light-gray text colors to enforced black."""
    for pattern, replacement in COLOR_NORMALIZATIONS:
        css = pattern.sub(replacement, css)
    return css


def extract_style_fragments(html: str, origin: int, normalize: bool = True) -> List[StyleFragment]:
    """
    Collect the contents of every non-empty <style> block.

    Args:
        html: Document markup
        origin: Position of the document in merge order
        normalize: Apply the color normalizations

    Returns:
        Fragments in document order
    """
    fragments = []
    for match in STYLE_BLOCK_PATTERN.finditer(html):
        css = match.group(1).strip()
        if not css:
            continue
        if normalize:
            css = normalize_css(css)
        fragments.append(StyleFragment(origin, css))
    return fragments


def remove_style_blocks(html: str) -> str:
    return STYLE_BLOCK_PATTERN.sub("", html)


def consolidate(fragments: Iterable[StyleFragment]) -> str:
    """Join fragment CSS in origin order (stable within one origin)."""
    ordered = sorted(fragments, key=lambda fragment: fragment.origin)
    return FRAGMENT_SEPARATOR.join(fragment.css for fragment in ordered)
