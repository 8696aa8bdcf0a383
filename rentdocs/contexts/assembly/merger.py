"""
Document Merger

Combines N resolved documents into one. The first document is the base and is
kept whole, wrapper included. Every later document has its style blocks
extracted with the light-gray colours forced to black, its doctype/html/head/body
wrapper stripped, and is appended to the base body behind a page-break marker.
Finally all inline style blocks are removed and one consolidated block is
injected into the base head.

Invariants:
- page-break markers = len(docs) - 1
- every style fragment appears exactly once in the consolidated block
"""

import re
from dataclasses import dataclass, field
from typing import List, Sequence

from rentdocs.contexts.assembly.logger import _log_debug, log_merge_result, log_merge_start
from rentdocs.contexts.assembly.styles import (
    StyleFragment,
    consolidate,
    extract_style_fragments,
    remove_style_blocks,
)

PAGE_BREAK_MARKER = '<p class="breakhere"></p>\n'

_DOCTYPE = re.compile(r"<!DOCTYPE\s+[^>]*>", re.IGNORECASE)
_HTML_TAG = re.compile(r"</?html\b[^>]*>", re.IGNORECASE)
_HEAD_SECTION = re.compile(r"<head\b[^>]*>[\s\S]*?</head>", re.IGNORECASE)
_BODY_TAG = re.compile(r"</?body\b[^>]*>", re.IGNORECASE)
_HEAD_OPEN = re.compile(r"<head\b[^>]*>", re.IGNORECASE)
_BODY_OPEN = re.compile(r"<body\b[^>]*>", re.IGNORECASE)
_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)


@dataclass(frozen=True)
class ResolvedDocument:
    """One resolved template, ready to merge."""

    name: str
    html: str


@dataclass
class MergedDocument:
    """
    Result of merging resolved documents.

    Attributes:
        html: Combined markup with the consolidated style block in its head
        fragments: Style fragments in origin order
        document_names: Source documents in merge order
        page_break_count: Number of page-break markers inserted
    """

    html: str
    fragments: List[StyleFragment] = field(default_factory=list)
    document_names: List[str] = field(default_factory=list)
    page_break_count: int = 0

    @property
    def document_count(self) -> int:
        return len(self.document_names)

    @property
    def styles(self) -> str:
        return consolidate(self.fragments)


def strip_structure(html: str) -> str:
    """Remove doctype, html, head (with contents) and body wrapper tags, then trim."""
    result = _DOCTYPE.sub("", html)
    result = _HTML_TAG.sub("", result)
    result = _HEAD_SECTION.sub("", result)
    result = _BODY_TAG.sub("", result)
    return result.strip()


def _append_to_body(base: str, content: str) -> str:
    """Insert content before the base's closing body tag, or at the end."""
    closing = list(_BODY_CLOSE.finditer(base))
    if closing:
        at = closing[-1].start()
        return base[:at] + content + base[at:]
    return base + content


def inject_styles(html: str, css: str) -> str:
    """
    Put one <style> block into the document head.

    A head is created before <body> (or at the very start) when absent.
    """
    block = f"<style>{css}</style>"
    head = _HEAD_OPEN.search(html)
    if head:
        return html[: head.end()] + block + html[head.end() :]
    body = _BODY_OPEN.search(html)
    if body:
        return html[: body.start()] + f"<head>{block}</head>" + html[body.start() :]
    return f"<head>{block}</head>" + html


def merge(docs: Sequence[ResolvedDocument]) -> MergedDocument:
    """
    Merge resolved documents in the given order.

    Args:
        docs: Resolved documents; the first is the base

    Returns:
        MergedDocument (identity on the markup for a single document)

    Raises:
        ValueError: If no documents are given
    """
    if not docs:
        raise ValueError("merge() needs at least one document")

    names = [doc.name for doc in docs]
    if len(docs) == 1:
        return MergedDocument(
            html=docs[0].html,
            fragments=extract_style_fragments(docs[0].html, origin=0, normalize=False),
            document_names=names,
        )

    log_merge_start(names)

    base = docs[0].html
    # Base styles are kept as authored; later documents get the colour rules
    fragments = extract_style_fragments(base, origin=0, normalize=False)
    appended: List[str] = []

    for origin, doc in enumerate(docs[1:], start=1):
        doc_fragments = extract_style_fragments(doc.html, origin=origin)
        fragments.extend(doc_fragments)
        body = strip_structure(doc.html)
        _log_debug(f"{doc.name}: {len(doc_fragments)} style fragment(s), {len(body)} chars of body")
        # Marker even for an empty body, so page breaks always equal documents - 1
        appended.append(PAGE_BREAK_MARKER + body)

    combined = _append_to_body(base, "".join(appended))
    combined = remove_style_blocks(combined)
    if fragments:
        combined = inject_styles(combined, consolidate(fragments))

    merged = MergedDocument(
        html=combined,
        fragments=fragments,
        document_names=names,
        page_break_count=len(docs) - 1,
    )
    log_merge_result(merged)
    return merged
