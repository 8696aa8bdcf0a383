"""
Document sinks.

A sink consumes one RenderedArtifact. Any failure is raised as SinkError so the
caller can tell "built but not delivered" from a generation failure.
"""

import base64
import os
import shutil
import subprocess
import sys
import tempfile
import webbrowser
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from rentdocs.contexts.delivery.email import EmailRequest, FileAttachment, HttpEmailSender
from rentdocs.contexts.delivery.exceptions import SinkError
from rentdocs.contexts.delivery.logger import (
    log_delivery_failure,
    log_delivery_result,
    log_delivery_start,
)
from rentdocs.contexts.rendering.renderer import RenderedArtifact

PDF_CONTENT_TYPE = "application/pdf"
PRINT_COMMANDS = ("lp", "lpr")


@dataclass
class DeliveryReceipt:
    """
    Proof of delivery.

    Attributes:
        sink_name: Sink that delivered the artifact
        file_name: Artifact file name
        location: Where it went (path, viewer target, or recipients)
        details: Sink-specific extras (e.g., email service response)
    """

    sink_name: str
    file_name: str
    location: str
    details: Dict[str, Any] = field(default_factory=dict)


class DocumentSink(ABC):
    """Consumes one rendered artifact."""

    name = "sink"

    def deliver(self, artifact: RenderedArtifact) -> DeliveryReceipt:
        """
        Deliver the artifact.

        Raises:
            SinkError: If delivery fails
        """
        log_delivery_start(self.name, artifact.file_name, artifact.page_count)
        try:
            receipt = self._deliver(artifact)
        except SinkError as e:
            log_delivery_failure(self.name, artifact.file_name, e)
            raise
        except Exception as e:
            log_delivery_failure(self.name, artifact.file_name, e)
            raise SinkError(
                "Document was generated but could not be delivered",
                sink_name=self.name,
                file_name=artifact.file_name,
                original_error=e,
            ) from e
        log_delivery_result(receipt)
        return receipt

    @abstractmethod
    def _deliver(self, artifact: RenderedArtifact) -> DeliveryReceipt:
        pass


class DownloadSink(DocumentSink):
    """Writes the PDF to <output_dir>/<file name>."""

    name = "download"

    def __init__(self, output_dir: Union[str, Path] = "."):
        self.output_dir = Path(output_dir)

    def _deliver(self, artifact: RenderedArtifact) -> DeliveryReceipt:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / artifact.file_name
        path.write_bytes(artifact.to_pdf())
        return DeliveryReceipt(self.name, artifact.file_name, str(path), {"bytes": path.stat().st_size})


def send_to_printer(path: Path) -> bool:
    """
    Hand a PDF to the platform print command.

    Windows prints through the file's registered "print" verb; elsewhere the
    file goes to `lp` (or `lpr`). Returns False when no print command exists.

    Raises:
        OSError: If the print command exits with an error
    """
    if sys.platform == "win32":
        os.startfile(str(path), "print")
        return True

    command = next((c for c in PRINT_COMMANDS if shutil.which(c)), None)
    if command is None:
        return False

    result = subprocess.run(
        [command, str(path)],
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    if result.returncode != 0:
        raise OSError(f"{command} exited with {result.returncode}: {result.stderr.strip()}")
    return True


class PrintSink(DocumentSink):
    """
    Sends the PDF to the platform print command.

    When no print command is available, the PDF is opened in the platform
    viewer instead so the user can print from there.

    Args:
        printer: Called with the PDF path (defaults to send_to_printer); returns
            False when printing is not available
        opener: Called with a file URI when printer returns False (defaults to
            webbrowser.open); must return a truthy value when a viewer launched
        temp_dir: Where the temporary PDF is written
    """

    name = "print"

    def __init__(
        self,
        printer: Optional[Callable[[Path], bool]] = None,
        opener: Optional[Callable[[str], Any]] = None,
        temp_dir: Optional[Union[str, Path]] = None,
    ):
        self.printer = printer or send_to_printer
        self.opener = opener or webbrowser.open
        self.temp_dir = temp_dir

    def _deliver(self, artifact: RenderedArtifact) -> DeliveryReceipt:
        with tempfile.NamedTemporaryFile(
            prefix=f"{Path(artifact.file_name).stem}_",
            suffix=".pdf",
            dir=self.temp_dir,
            delete=False,
        ) as handle:
            handle.write(artifact.to_pdf())
            path = Path(handle.name)

        if self.printer(path):
            return DeliveryReceipt(self.name, artifact.file_name, str(path), {"method": "printer"})

        if not self.opener(path.resolve().as_uri()):
            raise SinkError(
                "No print command or viewer available",
                sink_name=self.name,
                file_name=artifact.file_name,
            )
        return DeliveryReceipt(self.name, artifact.file_name, str(path), {"method": "viewer"})


class EmailSink(DocumentSink):
    """
    Attaches the PDF (base64) to a composed email and sends it.

    Args:
        request: Composed email (see compose_email); its attachment is replaced
        sender: Email sender (defaults to HttpEmailSender from the environment)
    """

    name = "email"

    def __init__(self, request: EmailRequest, sender: Optional[HttpEmailSender] = None):
        self.request = request
        self.sender = sender

    def _deliver(self, artifact: RenderedArtifact) -> DeliveryReceipt:
        attachment = FileAttachment(
            file_name=artifact.file_name,
            content_type=PDF_CONTENT_TYPE,
            content=base64.b64encode(artifact.to_pdf()).decode("ascii"),
        )
        sender = self.sender or HttpEmailSender()
        response = sender.send(self.request.with_attachment(attachment))
        recipients = ", ".join(address.email for address in self.request.to)
        return DeliveryReceipt(self.name, artifact.file_name, recipients, {"response": response})
