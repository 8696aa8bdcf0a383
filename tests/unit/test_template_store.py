"""Unit tests for template stores and concurrent fetching."""

import time

import pytest
import requests

from rentdocs.contexts.templating.exceptions import TemplateFetchError
from rentdocs.contexts.templating.template_store import (
    AssetTemplateStore,
    RemoteTemplateStore,
    StaticTemplateStore,
    TemplateSource,
    TemplateSourceMode,
    TemplateStore,
    create_template_store,
    fetch_templates,
)


class SlowFirstStore(TemplateStore):
    """Returns templates out of order: the first requested finishes last."""

    name = "slow-first"

    def __init__(self, templates):
        self.templates = templates

    def fetch(self, template_name):
        if template_name == "lease":
            time.sleep(0.05)
        return TemplateSource(template_name, self.templates[template_name])


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.mark.unit
def test_asset_store_reads_html_files(tmp_path):
    (tmp_path / "lease.html").write_text("<p>{{tenantName}}</p>", encoding="utf-8")
    store = AssetTemplateStore(tmp_path)

    source = store.fetch("lease")

    assert source == TemplateSource("lease", "<p>{{tenantName}}</p>")


@pytest.mark.unit
def test_asset_store_missing_file(tmp_path):
    store = AssetTemplateStore(tmp_path)

    with pytest.raises(TemplateFetchError) as excinfo:
        store.fetch("invoice")

    assert excinfo.value.template_name == "invoice"


@pytest.mark.unit
def test_remote_store_requires_url(monkeypatch):
    monkeypatch.setattr("rentdocs.contexts.templating.template_store.TEMPLATE_STORE_URL", "")

    with pytest.raises(ValueError):
        RemoteTemplateStore()


@pytest.mark.unit
def test_remote_store_fetches_by_name():
    session = FakeSession(FakeResponse("<p>live</p>"))
    store = RemoteTemplateStore("https://templates.example/api/", session=session)

    source = store.fetch("lease")

    assert source.markup == "<p>live</p>"
    assert session.urls and session.urls[0].endswith("lease")


@pytest.mark.unit
def test_remote_store_wraps_http_errors():
    store = RemoteTemplateStore("https://templates.example", session=FakeSession(FakeResponse(status_code=503)))

    with pytest.raises(TemplateFetchError) as excinfo:
        store.fetch("lease")

    assert isinstance(excinfo.value.original_error, requests.HTTPError)


@pytest.mark.unit
def test_remote_store_wraps_connection_errors():
    session = FakeSession(error=requests.ConnectionError("refused"))
    store = RemoteTemplateStore("https://templates.example", session=session)

    with pytest.raises(TemplateFetchError):
        store.fetch("lease")


@pytest.mark.unit
def test_fetch_preserves_requested_order():
    store = SlowFirstStore({"lease": "<p>L</p>", "welcome_letter": "<p>W</p>", "invoice": "<p>I</p>"})

    sources = fetch_templates(store, ["lease", "welcome_letter", "invoice"])

    assert [s.name for s in sources] == ["lease", "welcome_letter", "invoice"]


@pytest.mark.unit
def test_fetch_skips_empty_templates():
    store = StaticTemplateStore({"lease": "<p>L</p>", "blank": "   "})

    sources = fetch_templates(store, ["blank", "lease"])

    assert [s.name for s in sources] == ["lease"]


@pytest.mark.unit
def test_fetch_fails_when_all_empty():
    store = StaticTemplateStore({"blank": ""})

    with pytest.raises(TemplateFetchError):
        fetch_templates(store, ["blank"])


@pytest.mark.unit
def test_fetch_fails_without_names():
    with pytest.raises(TemplateFetchError):
        fetch_templates(StaticTemplateStore({}), [])


@pytest.mark.unit
def test_fetch_propagates_store_failure():
    with pytest.raises(TemplateFetchError):
        fetch_templates(StaticTemplateStore({"lease": "<p/>"}), ["lease", "missing"])


@pytest.mark.unit
def test_create_template_store(tmp_path):
    store = create_template_store(TemplateSourceMode.ASSETS, assets_path=tmp_path)
    assert isinstance(store, AssetTemplateStore)

    store = create_template_store(TemplateSourceMode.LIVE, base_url="https://templates.example")
    assert isinstance(store, RemoteTemplateStore)
