"""
Pipeline Orchestrator

Runs one document-generation request through the state machine

    IDLE -> RESOLVING -> MERGING -> RENDERING -> COMPLETE | FAILED

Templates are fetched (concurrently) while the request is IDLE, so a fetch
failure goes straight from IDLE to FAILED. Any stage failure ends the request
FAILED with the cause captured; no artifact is handed on. A COMPLETE request
gives its artifact to exactly one sink. A sink failure does not change the
state: the result carries `delivery_error` instead.

Every transition is logged (Tier 1) and recorded as a pipeline event (Tier 2).
The pipeline keeps no per-request state between calls.
"""

import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from rentdocs.contexts.assembly.merger import ResolvedDocument, merge
from rentdocs.contexts.assembly.print_styles import PrintStyleOptions, apply_print_styles
from rentdocs.contexts.delivery.exceptions import SinkError
from rentdocs.contexts.delivery.sinks import DeliveryReceipt, DocumentSink
from rentdocs.contexts.orchestration.logger import (
    _log_debug,
    log_request_result,
    log_request_start,
    log_transition,
    request_scope,
)
from rentdocs.contexts.rendering.exceptions import RenderingError
from rentdocs.contexts.rendering.geometry import PageGeometry
from rentdocs.contexts.rendering.measurer import FlowMeasurer
from rentdocs.contexts.rendering.page_presets import DEFAULT_PRESETS, resolve_page_geometry
from rentdocs.contexts.rendering.renderer import PaginatedRenderer, RenderedArtifact
from rentdocs.contexts.templating.exceptions import TemplateFetchError, TemplateRenderError
from rentdocs.contexts.templating.fragment_registry import FragmentRegistry
from rentdocs.contexts.templating.resolution_context import ResolutionContext
from rentdocs.contexts.templating.resolver import PlaceholderResolver, ResolutionResult
from rentdocs.contexts.templating.template_store import (
    TemplateSourceMode,
    TemplateStore,
    create_template_store,
    fetch_templates,
)
from rentdocs.utils.event_logging import log_pipeline_event, log_state_change

EVENT_SOURCE = "orchestration"


class RequestState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    MERGING = "merging"
    RENDERING = "rendering"
    COMPLETE = "complete"
    FAILED = "failed"


class RequestCancelledError(Exception):
    """
    Exception raised when the caller abandons a request before it completes.

    Attributes:
        request_id: The abandoned request
        state: State the request was in when cancellation was noticed
    """

    def __init__(self, request_id: str, state: RequestState):
        self.request_id = request_id
        self.state = state
        super().__init__(f"Request cancelled\n\nRequest: {request_id}\nState: {state.value}")


class CancellationToken:
    """Set by the caller to abandon a request; checked between stages."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class DocumentRequest:
    """
    One user-initiated generation action.

    Attributes:
        template_names: Templates to fetch, in merge order
        context: Layered placeholder values (shared by every template)
        file_name: Output file name (see generate_document_file_name)
        predicates: Predicate name -> value for conditional sections
        page_presets: Page-size and margin presets, applied in order
        geometry: Explicit page geometry (overrides page_presets)
        print_options: Print CSS options
        sink: Where the artifact goes on COMPLETE (None keeps it with the caller)
        request_id: Identifier used in logs and pipeline events
    """

    template_names: Sequence[str]
    context: ResolutionContext
    file_name: str
    predicates: Mapping[str, bool] = field(default_factory=dict)
    page_presets: Sequence[str] = DEFAULT_PRESETS
    geometry: Optional[PageGeometry] = None
    print_options: PrintStyleOptions = field(default_factory=PrintStyleOptions)
    sink: Optional[DocumentSink] = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class GenerationResult:
    """
    How a request ended.

    Attributes:
        request_id: Request identifier
        state: COMPLETE or FAILED
        artifact: Rendered artifact (always None when FAILED)
        error: Cause of a FAILED request
        failed_stage: State the request was in when it failed
        delivery_error: Sink failure after a valid artifact was produced
        receipt: Sink receipt when delivery succeeded
        resolutions: Per-template resolution reports
    """

    request_id: str
    state: RequestState
    artifact: Optional[RenderedArtifact] = None
    error: Optional[Exception] = None
    failed_stage: Optional[RequestState] = None
    delivery_error: Optional[SinkError] = None
    receipt: Optional[DeliveryReceipt] = None
    resolutions: Dict[str, ResolutionResult] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.state is RequestState.FAILED

    @property
    def delivered(self) -> bool:
        return self.receipt is not None

    def raise_for_failure(self) -> None:
        """Raise the generation error, or else the delivery error, if any."""
        if self.error is not None:
            raise self.error
        if self.delivery_error is not None:
            raise self.delivery_error


# Failures that end a request FAILED; anything else is a programming error and propagates
STAGE_ERRORS = (TemplateFetchError, TemplateRenderError, RenderingError, RequestCancelledError)


class _RequestRun:
    """State of one request while it runs."""

    def __init__(self, request_id: str, events_file: Optional[Path], cancel_token: Optional[CancellationToken]):
        self.request_id = request_id
        self.events_file = events_file
        self.cancel_token = cancel_token
        self.state = RequestState.IDLE

    def advance(self, new_state: RequestState, **extra) -> None:
        old_state = self.state
        self.state = new_state
        log_transition(self.request_id, old_state, new_state)
        log_state_change(
            self.request_id,
            old_state.value,
            new_state.value,
            source=EVENT_SOURCE,
            events_file=self.events_file,
            **extra,
        )

    def check_cancelled(self) -> None:
        if self.cancel_token is not None and self.cancel_token.cancelled:
            raise RequestCancelledError(self.request_id, self.state)


class DocumentPipeline:
    """
    Fetch, resolve, merge, render and deliver documents.

    Args:
        source_mode: Where templates come from (debug assets or the live store)
        store: Explicit template store (overrides source_mode)
        measurer: Flow measurer for the default renderer
        renderer: Explicit renderer (overrides measurer)
        resolver: Placeholder resolver
        registry: Fragment registry for the print shell
        events_file: Pipeline events log (defaults to PIPELINE_EVENTS_FILE)

    Example:
        pipeline = DocumentPipeline(TemplateSourceMode.ASSETS, measurer=SyntheticFlowMeasurer(2500))
        result = pipeline.generate(DocumentRequest(["lease"], context, "Lease_R1_2026-10-18.pdf"))
        result.raise_for_failure()
    """

    def __init__(
        self,
        source_mode: TemplateSourceMode = TemplateSourceMode.ASSETS,
        store: Optional[TemplateStore] = None,
        measurer: Optional[FlowMeasurer] = None,
        renderer: Optional[PaginatedRenderer] = None,
        resolver: Optional[PlaceholderResolver] = None,
        registry: Optional[FragmentRegistry] = None,
        events_file: Optional[Union[str, Path]] = None,
    ):
        self.source_mode = source_mode
        self.store = store or create_template_store(source_mode)
        self.renderer = renderer or PaginatedRenderer(measurer)
        self.resolver = resolver or PlaceholderResolver()
        self.registry = registry
        self.events_file = Path(events_file) if events_file else None

    def generate(
        self,
        request: DocumentRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """
        Run one request to COMPLETE or FAILED, then deliver.

        Raises:
            ValueError: If the request's page presets or geometry are invalid
        """
        geometry = request.geometry or resolve_page_geometry(request.page_presets)
        with request_scope(request.request_id):
            return self._generate(request, geometry, cancel_token)

    def _generate(
        self,
        request: DocumentRequest,
        geometry: PageGeometry,
        cancel_token: Optional[CancellationToken],
    ) -> GenerationResult:
        start_time = time.time()
        run = _RequestRun(request.request_id, self.events_file, cancel_token)
        log_request_start(request.request_id, request.file_name, request.template_names)
        log_pipeline_event(
            "request_started",
            request.request_id,
            EVENT_SOURCE,
            events_file=self.events_file,
            templates=list(request.template_names),
            file_name=request.file_name,
            template_source=self.source_mode.value,
        )

        result = GenerationResult(request_id=request.request_id, state=RequestState.IDLE)
        try:
            artifact = self._run_stages(request, geometry, run, result)
        except STAGE_ERRORS as e:
            result.failed_stage = run.state
            result.error = e
            run.advance(RequestState.FAILED, failed_stage=run.state.value, error=str(e).splitlines()[0])
            result.state = RequestState.FAILED
            log_request_result(result, time.time() - start_time)
            return result

        result.artifact = artifact
        result.state = RequestState.COMPLETE
        if request.sink is not None:
            self._deliver(request, artifact, result)

        log_request_result(result, time.time() - start_time)
        return result

    def _run_stages(
        self,
        request: DocumentRequest,
        geometry: PageGeometry,
        run: _RequestRun,
        result: GenerationResult,
    ) -> RenderedArtifact:
        sources = fetch_templates(self.store, request.template_names)
        run.check_cancelled()

        run.advance(RequestState.RESOLVING, templates=len(sources))
        resolved: List[ResolvedDocument] = []
        for source in sources:
            report = self.resolver.resolve_with_report(
                source.markup, request.context, request.predicates, template_name=source.name
            )
            result.resolutions[source.name] = report
            resolved.append(ResolvedDocument(name=source.name, html=report.text))
        run.check_cancelled()

        run.advance(RequestState.MERGING)
        merged = merge(resolved)
        page_html = apply_print_styles(merged, request.print_options, self.registry)
        _log_debug(f"Print-ready page: {len(page_html)} chars")
        run.check_cancelled()

        run.advance(RequestState.RENDERING, page_breaks=merged.page_break_count)
        artifact = self.renderer.render(
            page_html, geometry.page_size, geometry.margins, file_name=request.file_name
        )
        run.check_cancelled()

        run.advance(RequestState.COMPLETE, page_count=artifact.page_count)
        return artifact

    def _deliver(self, request: DocumentRequest, artifact: RenderedArtifact, result: GenerationResult) -> None:
        try:
            result.receipt = request.sink.deliver(artifact)
        except SinkError as e:
            result.delivery_error = e
            log_pipeline_event(
                "delivery_failed",
                request.request_id,
                EVENT_SOURCE,
                events_file=self.events_file,
                sink=request.sink.name,
                file_name=artifact.file_name,
                error=str(e).splitlines()[0],
            )
            return

        log_pipeline_event(
            "delivered",
            request.request_id,
            EVENT_SOURCE,
            events_file=self.events_file,
            sink=result.receipt.sink_name,
            file_name=artifact.file_name,
            location=result.receipt.location,
        )
