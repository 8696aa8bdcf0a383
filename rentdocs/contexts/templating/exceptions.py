"""Custom exceptions for templating context with template references."""

from pathlib import Path
from typing import Optional


class TemplateFetchError(Exception):
    """
    Exception raised when a required template cannot be retrieved.

    Generation aborts before resolution; the user sees "cannot generate document".

    Attributes:
        message: Error description
        template_name: Name of the template that could not be fetched
        location: Path or URL the store tried
        original_error: The underlying I/O or HTTP error
    """

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        location: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.template_name = template_name
        self.location = location
        self.original_error = original_error

        parts = [message]

        if template_name:
            parts.append(f"\nTemplate: {template_name}")
        if location:
            parts.append(f"Location: {location}")
        if original_error:
            parts.append(f"\nOriginal error: {str(original_error)}")

        super().__init__("\n".join(parts))


class TemplateRenderError(Exception):
    """
    Exception raised when an authored HTML fragment fails to render.

    Attributes:
        message: Error description
        fragment_name: Name of the fragment being rendered
        template_path: Path to the fragment file
        original_error: The original Jinja2 error
    """

    def __init__(
        self,
        message: str,
        fragment_name: Optional[str] = None,
        template_path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.fragment_name = fragment_name
        self.template_path = template_path
        self.original_error = original_error

        parts = [message]

        if fragment_name and template_path:
            parts.append(f"\nFragment: {template_path}")
            parts.append(f"Name: {fragment_name}")

        if original_error:
            parts.append(f"\nOriginal error: {str(original_error)}")

        super().__init__("\n".join(parts))
