"""Unit tests for document sinks."""

import base64
import subprocess

import pytest

from rentdocs.contexts.delivery.email import EmailAddress, compose_email
from rentdocs.contexts.delivery.exceptions import SinkError
from rentdocs.contexts.delivery import sinks
from rentdocs.contexts.delivery.sinks import DownloadSink, EmailSink, PrintSink, send_to_printer
from rentdocs.contexts.rendering.geometry import Margins, PageSize
from rentdocs.contexts.rendering.measurer import SyntheticFlowMeasurer
from rentdocs.contexts.rendering.renderer import PaginatedRenderer
from rentdocs.utils.pdf_processing import page_count


class RecordingSender:
    def __init__(self, error=None):
        self.error = error
        self.requests = []

    def send(self, request):
        if self.error is not None:
            raise self.error
        self.requests.append(request)
        return {"emailStatusId": 1}


@pytest.fixture
def artifact():
    renderer = PaginatedRenderer(SyntheticFlowMeasurer(1500))
    return renderer.render("<p/>", PageSize(816, 1056), Margins(28, 72, 28, 72), file_name="Lease_R1_2026-10-18.pdf")


@pytest.mark.unit
def test_download_sink_writes_pdf(tmp_path, artifact):
    receipt = DownloadSink(tmp_path / "out").deliver(artifact)

    path = tmp_path / "out" / "Lease_R1_2026-10-18.pdf"
    assert receipt.location == str(path)
    assert page_count(path) == 2


@pytest.mark.unit
def test_download_sink_failure_is_sink_error(tmp_path, artifact):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")

    with pytest.raises(SinkError) as excinfo:
        DownloadSink(blocker).deliver(artifact)

    assert excinfo.value.sink_name == "download"
    assert excinfo.value.original_error is not None


@pytest.mark.unit
def test_print_sink_sends_pdf_to_printer(tmp_path, artifact):
    printed = []

    def printer(path):
        printed.append(path)
        return True

    receipt = PrintSink(printer=printer, opener=lambda uri: pytest.fail("viewer opened"), temp_dir=tmp_path).deliver(
        artifact
    )

    assert printed and printed[0].suffix == ".pdf"
    assert receipt.details == {"method": "printer"}
    assert page_count(printed[0]) == 2


@pytest.mark.unit
def test_print_sink_falls_back_to_viewer(tmp_path, artifact):
    opened = []

    def opener(uri):
        opened.append(uri)
        return True

    receipt = PrintSink(printer=lambda path: False, opener=opener, temp_dir=tmp_path).deliver(artifact)

    assert opened and opened[0].startswith("file://")
    assert receipt.details == {"method": "viewer"}
    assert page_count(receipt.location) == 2


@pytest.mark.unit
def test_print_sink_without_printer_or_viewer(tmp_path, artifact):
    with pytest.raises(SinkError, match="No print command or viewer"):
        PrintSink(printer=lambda path: False, opener=lambda uri: False, temp_dir=tmp_path).deliver(artifact)


@pytest.mark.unit
def test_send_to_printer_runs_lp(tmp_path, monkeypatch):
    pdf = tmp_path / "doc.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    commands = []

    def run(cmd, **kwargs):
        commands.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="request id is office-1", stderr="")

    monkeypatch.setattr(sinks.sys, "platform", "linux")
    monkeypatch.setattr(sinks.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(sinks.subprocess, "run", run)

    assert send_to_printer(pdf)
    assert commands == [["lp", str(pdf)]]


@pytest.mark.unit
def test_send_to_printer_without_command(tmp_path, monkeypatch):
    monkeypatch.setattr(sinks.sys, "platform", "linux")
    monkeypatch.setattr(sinks.shutil, "which", lambda name: None)

    assert not send_to_printer(tmp_path / "doc.pdf")


@pytest.mark.unit
def test_print_command_failure_is_sink_error(tmp_path, artifact, monkeypatch):
    def run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="lp: No default destination")

    monkeypatch.setattr(sinks.sys, "platform", "linux")
    monkeypatch.setattr(sinks.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(sinks.subprocess, "run", run)

    with pytest.raises(SinkError) as excinfo:
        PrintSink(temp_dir=tmp_path).deliver(artifact)

    assert isinstance(excinfo.value.original_error, OSError)
    assert "No default destination" in str(excinfo.value.original_error)


@pytest.mark.unit
def test_email_sink_attaches_base64_pdf(artifact):
    sender = RecordingSender()
    request = compose_email("Lease", "<p>Attached</p>", {}, "ada@example.com", EmailAddress("office@x.com"))

    receipt = EmailSink(request, sender=sender).deliver(artifact)

    sent = sender.requests[0]
    assert sent.attachment.file_name == "Lease_R1_2026-10-18.pdf"
    assert sent.attachment.content_type == "application/pdf"
    assert base64.b64decode(sent.attachment.content) == artifact.to_pdf()
    assert request.attachment is None
    assert receipt.location == "ada@example.com"


@pytest.mark.unit
def test_email_sink_failure_is_sink_error(artifact):
    sender = RecordingSender(error=ConnectionError("service down"))
    request = compose_email("Lease", "", {}, "ada@example.com", EmailAddress("office@x.com"))

    with pytest.raises(SinkError) as excinfo:
        EmailSink(request, sender=sender).deliver(artifact)

    assert isinstance(excinfo.value.original_error, ConnectionError)
