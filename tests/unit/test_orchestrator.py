"""Unit tests for the document pipeline state machine."""

import pytest

from rentdocs.contexts.delivery.exceptions import SinkError
from rentdocs.contexts.delivery.sinks import DeliveryReceipt, DocumentSink
from rentdocs.contexts.orchestration.orchestrator import (
    CancellationToken,
    DocumentPipeline,
    DocumentRequest,
    RequestCancelledError,
    RequestState,
)
from rentdocs.contexts.rendering.exceptions import RenderingError
from rentdocs.contexts.rendering.measurer import SyntheticFlowMeasurer
from rentdocs.contexts.templating.exceptions import TemplateFetchError
from rentdocs.contexts.templating.resolution_context import ResolutionContext
from rentdocs.contexts.templating.template_store import StaticTemplateStore
from rentdocs.utils.event_logging import get_recent_events

TEMPLATES = {
    "lease": "<html><head><style>h1{color:#000}</style></head><body><h1>Lease {{reservationCode}}</h1></body></html>",
    "welcome_letter": "<html><body>{{#if depositTypeSDW}}<p>Deposit held</p>{{/if}}<p>Welcome {{tenantName}}</p></body></html>",
    "blank": "   ",
}


class RecordingSink(DocumentSink):
    name = "recording"

    def __init__(self):
        self.artifacts = []

    def _deliver(self, artifact):
        self.artifacts.append(artifact)
        return DeliveryReceipt(self.name, artifact.file_name, "memory")


class BrokenSink(DocumentSink):
    name = "broken"

    def _deliver(self, artifact):
        raise OSError("disk full")


class CancellingMeasurer(SyntheticFlowMeasurer):
    """Cancels the request while it renders."""

    def __init__(self, token):
        super().__init__(1500)
        self.token = token

    def measure(self, html, geometry):
        self.token.cancel()
        return super().measure(html, geometry)


@pytest.fixture
def context():
    return ResolutionContext.from_layers(
        [("reservation", {"reservationCode": "R-1042", "tenantName": "Ada Lovelace"})]
    )


@pytest.fixture
def events_file(tmp_path):
    return tmp_path / "pipeline_events.log"


def make_pipeline(events_file, flow_height=1500, measurer=None):
    return DocumentPipeline(
        store=StaticTemplateStore(TEMPLATES),
        measurer=measurer or SyntheticFlowMeasurer(flow_height),
        events_file=events_file,
    )


def transitions(events_file, request_id):
    events = get_recent_events(n=100, request_id=request_id, event_type="state_change", events_file=events_file)
    return [(e["old_state"], e["new_state"]) for e in events]


@pytest.mark.unit
def test_request_runs_to_complete(context, events_file):
    sink = RecordingSink()
    request = DocumentRequest(
        ["lease", "welcome_letter"],
        context,
        "Lease_R-1042_2026-10-18.pdf",
        predicates={"depositTypeSDW": True},
        sink=sink,
    )

    result = make_pipeline(events_file).generate(request)

    assert result.state is RequestState.COMPLETE
    assert not result.failed
    assert result.artifact.page_count == 2
    assert sink.artifacts == [result.artifact]
    assert result.delivered
    assert result.resolutions["lease"].text.count("R-1042") == 1
    assert "Deposit held" in result.resolutions["welcome_letter"].text
    assert transitions(events_file, request.request_id) == [
        ("idle", "resolving"),
        ("resolving", "merging"),
        ("merging", "rendering"),
        ("rendering", "complete"),
    ]


@pytest.mark.unit
def test_empty_templates_are_skipped(context, events_file):
    request = DocumentRequest(["blank", "lease"], context, "Lease_R1.pdf")

    result = make_pipeline(events_file).generate(request)

    assert result.state is RequestState.COMPLETE
    assert list(result.resolutions) == ["lease"]


@pytest.mark.unit
def test_fetch_failure_fails_from_idle(context, events_file):
    sink = RecordingSink()
    request = DocumentRequest(["lease", "missing"], context, "Lease_R1.pdf", sink=sink)

    result = make_pipeline(events_file).generate(request)

    assert result.state is RequestState.FAILED
    assert result.failed_stage is RequestState.IDLE
    assert isinstance(result.error, TemplateFetchError)
    assert result.artifact is None
    assert sink.artifacts == []
    assert transitions(events_file, request.request_id) == [("idle", "failed")]


@pytest.mark.unit
def test_zero_height_fails_while_rendering(context, events_file):
    pipeline = DocumentPipeline(
        store=StaticTemplateStore(TEMPLATES),
        measurer=SyntheticFlowMeasurer(0),
        events_file=events_file,
    )
    pipeline.renderer.fallback_flow_height = None

    result = pipeline.generate(DocumentRequest(["lease"], context, "Lease_R1.pdf"))

    assert result.failed
    assert result.failed_stage is RequestState.RENDERING
    assert isinstance(result.error, RenderingError)
    assert result.artifact is None
    with pytest.raises(RenderingError):
        result.raise_for_failure()


@pytest.mark.unit
def test_pdf_writer_failure_fails_while_rendering(context, events_file, monkeypatch):
    def broken_writer(pages, geometry, title=None):
        raise OSError("disk full")

    monkeypatch.setattr("rentdocs.contexts.rendering.renderer.write_pdf", broken_writer)
    sink = RecordingSink()

    result = make_pipeline(events_file).generate(DocumentRequest(["lease"], context, "Lease_R1.pdf", sink=sink))

    assert result.failed
    assert result.failed_stage is RequestState.RENDERING
    assert isinstance(result.error, RenderingError)
    assert result.error.stage == "write"
    assert result.artifact is None
    assert result.delivery_error is None
    assert sink.artifacts == []
    assert transitions(events_file, result.request_id)[-1] == ("rendering", "failed")


@pytest.mark.unit
def test_cancelled_request_never_completes(context, events_file):
    token = CancellationToken()
    sink = RecordingSink()
    pipeline = make_pipeline(events_file, measurer=CancellingMeasurer(token))

    result = pipeline.generate(DocumentRequest(["lease"], context, "Lease_R1.pdf", sink=sink), cancel_token=token)

    assert result.failed
    assert isinstance(result.error, RequestCancelledError)
    assert result.failed_stage is RequestState.RENDERING
    assert sink.artifacts == []


@pytest.mark.unit
def test_cancel_before_start_fails_from_idle(context, events_file):
    token = CancellationToken()
    token.cancel()

    result = make_pipeline(events_file).generate(
        DocumentRequest(["lease"], context, "Lease_R1.pdf"), cancel_token=token
    )

    assert result.failed_stage is RequestState.IDLE
    assert isinstance(result.error, RequestCancelledError)


@pytest.mark.unit
def test_sink_failure_keeps_artifact(context, events_file):
    request = DocumentRequest(["lease"], context, "Lease_R1.pdf", sink=BrokenSink())

    result = make_pipeline(events_file).generate(request)

    assert result.state is RequestState.COMPLETE
    assert result.artifact is not None
    assert isinstance(result.delivery_error, SinkError)
    assert not result.delivered
    assert get_recent_events(event_type="delivery_failed", events_file=events_file)[0]["sink"] == "broken"
    with pytest.raises(SinkError):
        result.raise_for_failure()


@pytest.mark.unit
def test_unknown_preset_is_rejected(context, events_file):
    request = DocumentRequest(["lease"], context, "Lease_R1.pdf", page_presets=["size_tabloid"])

    with pytest.raises(ValueError):
        make_pipeline(events_file).generate(request)


@pytest.mark.unit
def test_requests_are_independent(context, events_file):
    pipeline = make_pipeline(events_file)

    first = pipeline.generate(DocumentRequest(["lease"], context, "Lease_R1.pdf"))
    second = pipeline.generate(
        DocumentRequest(["lease"], context.with_layer("override", {"reservationCode": "R-2"}), "Lease_R2.pdf")
    )

    assert "R-1042" in first.resolutions["lease"].text
    assert "R-2" in second.resolutions["lease"].text
    assert first.request_id != second.request_id
