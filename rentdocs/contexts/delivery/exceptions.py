"""Custom exceptions for delivery context."""

from typing import Optional


class SinkError(Exception):
    """
    Exception raised when a sink fails after a valid artifact was produced.

    Reported apart from generation failures: the document was built but not
    delivered.

    Attributes:
        message: Error description
        sink_name: Sink that failed (e.g., "download", "email")
        file_name: Artifact file name
        original_error: The underlying I/O, HTTP or platform error
    """

    def __init__(
        self,
        message: str,
        sink_name: Optional[str] = None,
        file_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.sink_name = sink_name
        self.file_name = file_name
        self.original_error = original_error

        parts = [message]

        if sink_name:
            parts.append(f"\nSink: {sink_name}")
        if file_name:
            parts.append(f"File: {file_name}")
        if original_error:
            parts.append(f"\nOriginal error: {str(original_error)}")

        super().__init__("\n".join(parts))
