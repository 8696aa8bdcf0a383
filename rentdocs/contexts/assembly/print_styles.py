"""
Print preparation.

Turns a merged document into the print-ready page that the renderer lays out:
style blocks are pulled out, the <title> is dropped, logo images are pinned to
a fixed width, and the body content is wrapped in the print shell with the
document CSS followed by the print CSS.

Page size and margins are not expressed as @page rules here; the renderer
applies them from the page geometry presets.
"""

import re
from dataclasses import dataclass
from typing import Optional

from rentdocs.contexts.assembly.logger import _log_debug
from rentdocs.contexts.assembly.merger import MergedDocument
from rentdocs.contexts.assembly.styles import STYLE_BLOCK_PATTERN, remove_style_blocks
from rentdocs.contexts.templating.fragment_registry import FragmentRegistry, get_fragment_registry

PRINT_SHELL_FRAGMENT = "print_document"

LOGO_WIDTH_PX = 180

_TITLE = re.compile(r"<title[^>]*>[\s\S]*?</title>", re.IGNORECASE)
_LOGO_IMG = re.compile(r"<img([^>]*class=[\"'][^\"']*logo[^\"']*[\"'][^>]*)>", re.IGNORECASE)
_SIZE_ATTRIBUTES = re.compile(r"\s+(width|height)=[\"'][^\"']*[\"']", re.IGNORECASE)
_BODY_OPEN = re.compile(r"<body[^>]*>", re.IGNORECASE)
_BODY_OR_HTML_CLOSE = re.compile(r"</(body|html)>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<html[^>]*>|</html>", re.IGNORECASE)
_HEAD_SECTION = re.compile(r"<head[^>]*>[\s\S]*?</head>", re.IGNORECASE)
_BODY_TAG = re.compile(r"<body[^>]*>|</body>", re.IGNORECASE)

BASE_PRINT_CSS = """
body {{
  font-size: {font_size} !important;
  line-height: 1.4 !important;
  padding: 0 !important;
  margin: 0 !important;
}}

.header {{
  position: relative !important;
  page-break-inside: avoid !important;
  break-inside: avoid !important;
  margin-top: 0 !important;
  padding-top: 0 !important;
  margin-bottom: 1rem !important;
}}

.logo {{
  position: relative !important;
  top: auto !important;
  left: auto !important;
  max-height: 100px !important;
  max-width: 200px !important;
  display: block !important;
  margin-bottom: 1rem !important;
}}

.content {{
  margin-top: 0 !important;
}}

h1 {{
  font-size: 18pt !important;
}}

h2 {{
  font-size: 14pt !important;
}}

h3 {{
  font-size: 12pt !important;
}}

p {{
  margin: 0.3em 0 !important;{paragraph_font}
}}

p, li {{
  orphans: 2;
  widows: 2;
}}

p.breakhere {{
  page-break-before: always !important;
  break-before: page !important;
  display: block !important;
  height: 0 !important;
  margin: 0 !important;
  padding: 0 !important;
}}
"""

LEASE_PRINT_CSS = """
section,
.corporate-letter,
.notice-intent {
  page-break-inside: avoid !important;
  break-inside: avoid !important;
  display: block !important;
}

#container,
table#container,
#container tr,
table#container tr {
  page-break-inside: auto !important;
  break-inside: auto !important;
}

#container tbody tr:first-child td {
  height: 1px !important;
}

#container tbody tr:first-child td .border {
  height: 100% !important;
}

#header,
table#header {
  page-break-inside: avoid !important;
  break-inside: avoid !important;
}
"""


@dataclass(frozen=True)
class PrintStyleOptions:
    """
    Print CSS options.

    Attributes:
        font_size: Body font size (leases print at 10pt)
        include_lease_styles: Keep lease sections and headers unbroken
    """

    font_size: str = "11pt"
    include_lease_styles: bool = False

    @classmethod
    def for_lease(cls) -> "PrintStyleOptions":
        return cls(font_size="10pt", include_lease_styles=True)


def get_print_styles(options: Optional[PrintStyleOptions] = None, wrap_in_media_query: bool = False) -> str:
    """Print CSS for the given options, optionally wrapped in @media print."""
    options = options or PrintStyleOptions()
    paragraph_font = f"\n  font-size: {options.font_size} !important;" if options.font_size == "10pt" else ""
    css = BASE_PRINT_CSS.format(font_size=options.font_size, paragraph_font=paragraph_font)
    if options.include_lease_styles:
        css += LEASE_PRINT_CSS
    if wrap_in_media_query:
        return f"@media print {{{css}}}"
    return css


def fix_logo_images(html: str) -> str:
    """Pin every <img class="...logo..."> to width 180 with automatic height."""

    def _pin(match: re.Match) -> str:
        attributes = _SIZE_ATTRIBUTES.sub("", match.group(1))
        # Self-closing slash would end up before the new attributes
        attributes = attributes.rstrip().rstrip("/").rstrip()
        return f'<img{attributes} width="{LOGO_WIDTH_PX}" height="auto">'

    return _LOGO_IMG.sub(_pin, html)


def extract_body_content(html: str) -> str:
    """
    Everything after the first <body> tag, minus closing body/html tags.

    Documents without a body tag have their html/head/body wrapper removed.
    """
    body = _BODY_OPEN.search(html)
    if body:
        content = html[body.end() :]
        return _BODY_OR_HTML_CLOSE.sub("", content).strip()
    return _BODY_TAG.sub("", _HEAD_SECTION.sub("", _HTML_TAG.sub("", html)))


def apply_print_styles(
    merged: MergedDocument,
    options: Optional[PrintStyleOptions] = None,
    registry: Optional[FragmentRegistry] = None,
) -> str:
    """
    Build the print-ready page for a merged document.

    Args:
        merged: Output of merge()
        options: Print CSS options (defaults to 11pt, no lease rules)
        registry: Fragment registry holding the print shell

    Returns:
        Complete HTML page: merged CSS, then print CSS, then the body content
    """
    registry = registry or get_fragment_registry()

    document_css = "\n\n".join(
        match.group(1).strip() for match in STYLE_BLOCK_PATTERN.finditer(merged.html) if match.group(1).strip()
    )
    html = remove_style_blocks(merged.html)
    html = _TITLE.sub("", html)
    html = fix_logo_images(html)
    body = extract_body_content(html)

    _log_debug(f"Print page: {len(document_css)} chars of document CSS, {len(body)} chars of body")
    return registry.render(
        PRINT_SHELL_FRAGMENT,
        document_styles=document_css,
        print_styles=get_print_styles(options),
        body=body,
    )
