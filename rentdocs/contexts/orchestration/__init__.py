"""
Orchestration Context

Responsibilities:
- Runs each generation request through IDLE -> RESOLVING -> MERGING -> RENDERING -> COMPLETE | FAILED
- Selects the template store from the TemplateSourceMode it is constructed with
- Hands a completed artifact to the request's single sink
- Records state transitions as pipeline events

Owns: Request state machine, cancellation, generation results
Never: Implements resolution, merging, layout or delivery itself
"""

from rentdocs.contexts.orchestration.orchestrator import (
    CancellationToken,
    DocumentPipeline,
    DocumentRequest,
    GenerationResult,
    RequestCancelledError,
    RequestState,
)

__all__ = [
    "DocumentPipeline",
    "DocumentRequest",
    "GenerationResult",
    "RequestState",
    "CancellationToken",
    "RequestCancelledError",
]
