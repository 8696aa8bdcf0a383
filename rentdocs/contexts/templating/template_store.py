"""
Template stores.

A template store returns the raw markup for a named template. The orchestrator
is given a TemplateSourceMode when it is constructed and builds the matching
store; nothing else decides between debug and live templates.

- AssetTemplateStore: <name>.html files in a local directory (debug mode)
- RemoteTemplateStore: HTTP GET against the live template service
- StaticTemplateStore: templates already held in memory (e.g. on a property record)
"""

import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import requests
from dotenv import load_dotenv

from rentdocs.contexts.templating.exceptions import TemplateFetchError
from rentdocs.contexts.templating.logger import _log_debug, _log_warning, log_fetch_start

load_dotenv()
TEMPLATE_ASSETS_PATH = Path(os.getenv("TEMPLATE_ASSETS_PATH", "assets/templates"))
TEMPLATE_STORE_URL = os.getenv("TEMPLATE_STORE_URL", "")
TEMPLATE_FETCH_TIMEOUT_S = float(os.getenv("TEMPLATE_FETCH_TIMEOUT_S", "10"))

MAX_FETCH_WORKERS = 4


class TemplateSourceMode(Enum):
    """Where templates come from."""

    ASSETS = "assets"
    LIVE = "live"


@dataclass(frozen=True)
class TemplateSource:
    """Raw markup of one named template, immutable for the life of a request."""

    name: str
    markup: str

    @property
    def is_empty(self) -> bool:
        return not self.markup.strip()


class TemplateStore(ABC):
    """Fetches raw template markup by name."""

    name = "store"

    @abstractmethod
    def fetch(self, template_name: str) -> TemplateSource:
        """
        Fetch one template.

        Raises:
            TemplateFetchError: If the template cannot be retrieved
        """


class AssetTemplateStore(TemplateStore):
    """Reads <name>.html from a directory."""

    name = "assets"

    def __init__(self, assets_path: Optional[Path] = None):
        self.assets_path = Path(assets_path) if assets_path is not None else TEMPLATE_ASSETS_PATH

    def fetch(self, template_name: str) -> TemplateSource:
        path = self.assets_path / f"{template_name}.html"
        try:
            markup = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateFetchError(
                "Cannot generate document: template file could not be read",
                template_name=template_name,
                location=str(path),
                original_error=e,
            ) from e
        return TemplateSource(template_name, markup)


class RemoteTemplateStore(TemplateStore):
    """GETs {base_url}/{name} from the live template service."""

    name = "live"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = TEMPLATE_FETCH_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ):
        base_url = base_url if base_url is not None else TEMPLATE_STORE_URL
        if not base_url:
            raise ValueError("RemoteTemplateStore needs a base URL (set TEMPLATE_STORE_URL)")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, template_name: str) -> TemplateSource:
        url = f"{self.base_url}/{template_name}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TemplateFetchError(
                "Cannot generate document: template request failed",
                template_name=template_name,
                location=url,
                original_error=e,
            ) from e
        return TemplateSource(template_name, response.text)


class StaticTemplateStore(TemplateStore):
    """Serves templates from an in-memory mapping."""

    name = "static"

    def __init__(self, templates: Mapping[str, str]):
        self.templates = dict(templates)

    def fetch(self, template_name: str) -> TemplateSource:
        if template_name not in self.templates:
            raise TemplateFetchError(
                "Cannot generate document: template not available",
                template_name=template_name,
            )
        return TemplateSource(template_name, self.templates[template_name])


def create_template_store(
    mode: TemplateSourceMode,
    assets_path: Optional[Path] = None,
    base_url: Optional[str] = None,
) -> TemplateStore:
    """Build the store for a source mode."""
    if mode is TemplateSourceMode.ASSETS:
        return AssetTemplateStore(assets_path)
    if mode is TemplateSourceMode.LIVE:
        return RemoteTemplateStore(base_url)
    raise ValueError(f"Unknown template source mode: {mode}")


def fetch_templates(
    store: TemplateStore,
    template_names: Sequence[str],
    max_workers: int = MAX_FETCH_WORKERS,
) -> List[TemplateSource]:
    """
    Fetch several templates concurrently, keeping the requested order.

    Empty templates are skipped with a warning.

    Args:
        store: Template store to read from
        template_names: Templates in merge order
        max_workers: Upper bound on concurrent fetches

    Returns:
        Non-empty TemplateSources in the order of `template_names`

    Raises:
        TemplateFetchError: If any fetch fails or every template is empty
    """
    if not template_names:
        raise TemplateFetchError("Cannot generate document: no templates requested")

    log_fetch_start(template_names, store.name)

    workers = max(1, min(max_workers, len(template_names)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        # map() yields results in submission order regardless of completion order
        sources = list(executor.map(store.fetch, template_names))

    kept: List[TemplateSource] = []
    for source in sources:
        if source.is_empty:
            _log_warning(f"Template '{source.name}' is empty, skipping")
            continue
        _log_debug(f"Fetched '{source.name}' ({len(source.markup)} chars)")
        kept.append(source)

    if not kept:
        raise TemplateFetchError(
            "Cannot generate document: all templates are empty",
            template_name=", ".join(template_names),
        )
    return kept

