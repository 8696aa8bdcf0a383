#!/usr/bin/env python3
"""
Document Generation CLI

Fetches templates, resolves them against a context file, merges them into one
document, paginates it to PDF and hands it to a sink.

Commands:
    generate - Generate a PDF from one or more templates
    resolve  - Print one resolved template
    events   - Show recent pipeline events
    presets  - List page-size and margin presets

The context file is YAML with named layers (applied in order, later layers win)
and optional predicates:

    layers:
      reservation:
        reservationCode: R-1042
        tenantName: Ada Lovelace
      property:
        propertyCode: APT-7
    predicates:
      billingTypeMonthly: true

Examples:\n

    generate_document.py generate lease -c ctx.yaml --kind Lease --code R-1042

    generate_document.py generate invoice -c ctx.yaml --kind Invoice --sink print

    generate_document.py resolve assets/templates/lease.html -c ctx.yaml

    generate_document.py events -n 20 --relative
"""

import json
import os
from pathlib import Path
from typing import Dict, List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from rentdocs.contexts.assembly import PrintStyleOptions
from rentdocs.contexts.delivery import DocumentKind, DownloadSink, PrintSink, generate_document_file_name
from rentdocs.contexts.orchestration import DocumentPipeline, DocumentRequest
from rentdocs.contexts.orchestration.logger import setup_pipeline_logger
from rentdocs.contexts.rendering import (
    DEFAULT_PRESETS,
    ChromiumFlowMeasurer,
    SyntheticFlowMeasurer,
    list_presets,
)
from rentdocs.contexts.templating import PlaceholderResolver, TemplateSourceMode, load_context_file
from rentdocs.utils.event_logging import get_recent_events
from rentdocs.utils.timestamp import format_timestamp, now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
OUTPUT_PATH = Path(os.getenv("OUTPUT_PATH", "outs/documents"))

SINKS = ("download", "print", "none")
MEASURERS = ("chromium", "synthetic")

app = typer.Typer(
    help="Generate rental documents (leases, welcome letters, invoices) as paginated PDFs",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def parse_predicates(values: List[str]) -> Dict[str, bool]:
    """Parse NAME=true|false options."""
    predicates = {}
    for item in values:
        name, _, value = item.partition("=")
        if not name or value.lower() not in ("true", "false", "1", "0", "yes", "no"):
            raise typer.BadParameter(f"Expected NAME=true|false, got '{item}'")
        predicates[name] = value.lower() in ("true", "1", "yes")
    return predicates


@app.command("generate")
def generate_command(
    templates: Annotated[
        List[str],
        typer.Argument(help="Template names in merge order (e.g., lease welcome_letter)"),
    ],
    context_file: Annotated[
        Optional[Path],
        typer.Option("--context", "-c", help="YAML context file with layers and predicates", exists=True),
    ] = None,
    predicate: Annotated[
        List[str],
        typer.Option("--predicate", "-P", help="Predicate override NAME=true|false (repeatable)"),
    ] = [],
    kind: Annotated[
        str,
        typer.Option("--kind", "-k", help="Document kind: Invoice, Lease or Letter"),
    ] = "Lease",
    code: Annotated[
        Optional[str],
        typer.Option("--code", help="Record code for the file name (reservation, invoice, ...)"),
    ] = None,
    preset: Annotated[
        List[str],
        typer.Option("--preset", "-p", help="Page preset (repeatable, applied in order)"),
    ] = list(DEFAULT_PRESETS),
    lease_styles: Annotated[
        bool,
        typer.Option("--lease-styles", help="Print at 10pt with lease section rules"),
    ] = False,
    source: Annotated[
        str,
        typer.Option("--source", "-s", help="Template source: assets or live"),
    ] = "assets",
    measurer: Annotated[
        str,
        typer.Option("--measurer", "-m", help="Flow measurer: chromium or synthetic"),
    ] = "chromium",
    flow_height: Annotated[
        float,
        typer.Option("--flow-height", help="Flow height in px for the synthetic measurer"),
    ] = 1000.0,
    sink: Annotated[
        str,
        typer.Option("--sink", help="Where the PDF goes: download, print or none"),
    ] = "download",
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory for downloaded PDFs"),
    ] = OUTPUT_PATH,
):
    """
    Generate a PDF from one or more templates.

    Examples:\n

        $ generate_document.py generate lease -c ctx.yaml --kind Lease --code R-1042

        $ generate_document.py generate lease welcome_letter -c ctx.yaml -p size_a4

        $ generate_document.py generate invoice -c ctx.yaml -m synthetic --flow-height 2500
    """
    if sink not in SINKS:
        raise typer.BadParameter(f"--sink must be one of {SINKS}")
    if measurer not in MEASURERS:
        raise typer.BadParameter(f"--measurer must be one of {MEASURERS}")
    try:
        document_kind = DocumentKind(kind)
        source_mode = TemplateSourceMode(source)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    context, predicates = load_context_file(context_file)
    predicates.update(parse_predicates(predicate))

    log_dir = LOGS_PATH / f"generate_{now()}"
    log_file = setup_pipeline_logger(log_dir, template_source_mode=source_mode.value)

    file_name = generate_document_file_name(document_kind, code)
    typer.secho(f"\nGenerating: {file_name}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Templates: {', '.join(templates)}")
    typer.echo("")

    flow_measurer = ChromiumFlowMeasurer() if measurer == "chromium" else SyntheticFlowMeasurer(flow_height)
    document_sink = {
        "download": lambda: DownloadSink(output_dir),
        "print": PrintSink,
        "none": lambda: None,
    }[sink]()

    try:
        pipeline = DocumentPipeline(source_mode, measurer=flow_measurer)
        result = pipeline.generate(
            DocumentRequest(
                template_names=templates,
                context=context,
                file_name=file_name,
                predicates=predicates,
                page_presets=preset,
                print_options=PrintStyleOptions.for_lease() if lease_styles else PrintStyleOptions(),
                sink=document_sink,
            )
        )
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo("")
    if result.failed:
        typer.secho(
            f"✗ Cannot generate document (failed while {result.failed_stage.value})",
            fg=typer.colors.RED,
            bold=True,
        )
        typer.secho(f"  {result.error}", fg=typer.colors.RED)
    else:
        typer.secho("✓ Document generated", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  Pages: {result.artifact.page_count}")
        for name, report in result.resolutions.items():
            if report.unresolved:
                typer.echo(f"  {name}: {len(report.unresolved)} unresolved placeholder(s)")
        if result.delivery_error is not None:
            typer.secho("  ✗ Generated but not delivered", fg=typer.colors.YELLOW, bold=True)
            typer.secho(f"  {result.delivery_error}", fg=typer.colors.YELLOW)
        elif result.receipt is not None:
            typer.echo(f"  {result.receipt.sink_name}: {result.receipt.location}")

    typer.echo(f"  Log: {log_file}")
    typer.echo("")

    raise typer.Exit(code=0 if not result.failed and result.delivery_error is None else 1)


@app.command("resolve")
def resolve_command(
    template_file: Annotated[
        Path,
        typer.Argument(help="Template file to resolve", exists=True, dir_okay=False),
    ],
    context_file: Annotated[
        Optional[Path],
        typer.Option("--context", "-c", help="YAML context file with layers and predicates", exists=True),
    ] = None,
    predicate: Annotated[
        List[str],
        typer.Option("--predicate", "-P", help="Predicate override NAME=true|false (repeatable)"),
    ] = [],
):
    """
    Print a resolved template to stdout; degradations go to stderr.

    Examples:\n

        $ generate_document.py resolve assets/templates/lease.html -c ctx.yaml

        $ generate_document.py resolve invoice.html -c ctx.yaml -P billingTypeMonthly=false
    """
    context, predicates = load_context_file(context_file)
    predicates.update(parse_predicates(predicate))

    report = PlaceholderResolver().resolve_with_report(
        template_file.read_text(encoding="utf-8"), context, predicates
    )
    typer.echo(report.text)

    if report.unresolved:
        typer.secho(f"Unresolved: {', '.join(sorted(report.unresolved))}", fg=typer.colors.YELLOW, err=True)
    if report.malformed_conditionals:
        typer.secho(
            f"Unterminated conditionals: {', '.join(report.malformed_conditionals)}",
            fg=typer.colors.YELLOW,
            err=True,
        )
    if report.discarded_tags:
        typer.secho(f"Removed tags: {', '.join(report.discarded_tags)}", fg=typer.colors.YELLOW, err=True)


@app.command("events")
def events_command(
    n: Annotated[int, typer.Option("--num", "-n", help="Number of recent events to show")] = 10,
    request_id: Annotated[
        Optional[str], typer.Option("--request", "-r", help="Filter to events for this request")
    ] = None,
    event_type: Annotated[
        Optional[str], typer.Option("--event-type", "-e", help="Filter to events of this type")
    ] = None,
    relative: Annotated[
        bool, typer.Option("--relative", help="Show relative timestamps (e.g., '2h ago')")
    ] = False,
    compact: Annotated[
        bool, typer.Option("--compact", help="Print one event per line as JSON")
    ] = False,
):
    """
    Show the last n pipeline events.

    Examples:\n

        $ generate_document.py events                      # Last 10 events

        $ generate_document.py events -e state_change      # Last 10 state changes

        $ generate_document.py events -r 5f0c... --relative
    """
    events = get_recent_events(n=n, request_id=request_id, event_type=event_type)

    if not events:
        typer.secho("No events found", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)

    for event in events:
        if compact:
            typer.echo(json.dumps(event))
            continue

        when = format_timestamp(event["timestamp"], relative=relative)
        summary = event["event_type"]
        if event["event_type"] == "state_change":
            summary = f"{event['old_state']} -> {event['new_state']}"
        typer.echo(f"{when}  {event['request_id'][:8]}  {summary}")


@app.command("presets")
def presets_command():
    """List available page presets."""
    for name in list_presets():
        typer.echo(name)


if __name__ == "__main__":
    app()
