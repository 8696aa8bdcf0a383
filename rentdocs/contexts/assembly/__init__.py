"""
Assembly Context

Responsibilities:
- Merges resolved documents into one artifact with page-break markers
- Extracts, normalizes and consolidates style fragments
- Prepares the merged document for print (print CSS, logo sizing, shell)

Owns: Merge order, style consolidation, print CSS
Never: Resolves placeholders or measures layout
"""

from rentdocs.contexts.assembly.merger import (
    PAGE_BREAK_MARKER,
    MergedDocument,
    ResolvedDocument,
    merge,
    strip_structure,
)
from rentdocs.contexts.assembly.print_styles import (
    PrintStyleOptions,
    apply_print_styles,
    get_print_styles,
)
from rentdocs.contexts.assembly.styles import StyleFragment, consolidate, extract_style_fragments

__all__ = [
    "merge",
    "strip_structure",
    "MergedDocument",
    "ResolvedDocument",
    "PAGE_BREAK_MARKER",
    "StyleFragment",
    "extract_style_fragments",
    "consolidate",
    "PrintStyleOptions",
    "apply_print_styles",
    "get_print_styles",
]
