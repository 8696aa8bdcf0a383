"""Custom exceptions for rendering context."""

from typing import Optional


class RenderingError(Exception):
    """
    Exception raised when the merged document cannot be measured, paginated or written.

    Always fatal for the request: a dropped page is never acceptable.

    Attributes:
        message: Error description
        stage: Rendering step that failed ("measure", "paginate" or "write")
        flow_height: Measured flow height, when known
        original_error: The underlying layout-engine error
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        flow_height: Optional[float] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.stage = stage
        self.flow_height = flow_height
        self.original_error = original_error

        parts = [message]

        if stage:
            parts.append(f"\nStage: {stage}")
        if flow_height is not None:
            parts.append(f"Flow height: {flow_height}")
        if original_error:
            parts.append(f"\nOriginal error: {str(original_error)}")

        super().__init__("\n".join(parts))
