"""
netsieve CLI - Command Line Interface

Entry point for offline classification of recorded network events:
classifying HAR / JSON Lines files, explaining single verdicts, and
listing presets.
"""

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from netsieve import __version__
from netsieve.core.constants import DROP_RULES, PresetName, Rule
from netsieve.core.exceptions import NetSieveError
from netsieve.core.models import HttpMessage, RequestEvent

# Create CLI app
app = typer.Typer(
    name="netsieve",
    help="netsieve - Keep/drop classification of captured network events",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for output
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _resolve_classifier(
    preset: Optional[PresetName],
    config: Optional[Path],
    own_domains: Optional[List[str]],
):
    """Build the classifier selected on the command line.

    A config file wins over a preset; the balanced preset is the default.
    """
    from netsieve.core.config import load_classifier
    from netsieve.sanitizer.engine import Classifier
    from netsieve.sanitizer.presets import get_preset

    if config is not None and preset is not None:
        raise typer.BadParameter("Use either --preset or --config, not both")

    if config is not None:
        console.print(f"[blue]Loading config from:[/blue] {config}")
        classifier = load_classifier(config)
    else:
        classifier = get_preset(preset or PresetName.BALANCED)

    # Extra own domains extend whatever the classifier already treats as own
    if own_domains and type(classifier) is Classifier:
        merged = tuple(classifier.config.own_domains) + tuple(own_domains)
        classifier = Classifier(
            replace(classifier.config, own_domains=merged),
            name=classifier.name,
        )

    return classifier


# ============================================================================
# Main Commands
# ============================================================================

@app.command()
def classify(
    events_file: Path = typer.Argument(
        ...,
        help="Recorded events (.har, .jsonl or .ndjson)",
        exists=True,
        dir_okay=False,
    ),
    preset: Optional[PresetName] = typer.Option(
        None,
        "--preset",
        "-p",
        help="Classifier preset (default: balanced)",
        case_sensitive=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Classifier YAML configuration",
        exists=True,
    ),
    own_domain: Optional[List[str]] = typer.Option(
        None,
        "--own-domain",
        "-d",
        help="Additional first-party domain (repeatable)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write kept events to this JSON Lines file",
    ),
    audit_dir: Optional[Path] = typer.Option(
        None,
        "--audit-dir",
        help="Directory for the JSON Lines decision audit log",
    ),
    show_dropped: bool = typer.Option(
        False,
        "--show-dropped",
        help="List dropped events too",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output",
    ),
) -> None:
    """
    Classify recorded network events and report what would be kept.
    """
    from netsieve.core.audit import DecisionAuditLogger
    from netsieve.core.constants import AuditEventType
    from netsieve.core.events import load_events, write_events_jsonl
    from netsieve.core.utils import tally_decisions

    _setup_logging(verbose)

    try:
        classifier = _resolve_classifier(preset, config, own_domain)
        events = load_events(events_file)

        console.print(Panel.fit(
            f"[bold cyan]netsieve classification[/bold cyan]\n\n"
            f"Events: [yellow]{events_file}[/yellow] ({len(events)})\n"
            f"Classifier: [green]{classifier.name}[/green]",
            title="Session",
        ))

        decisions, counts = tally_decisions(events, classifier.explain)

        audit_path = None
        if audit_dir is not None:
            with DecisionAuditLogger(session_id=str(uuid4()), audit_dir=audit_dir) as audit:
                audit.log_event(
                    AuditEventType.SESSION_START,
                    {"events_file": str(events_file), "classifier": classifier.name},
                )
                for event, decision in zip(events, decisions):
                    audit.log_decision(event, decision)
                audit.log_event(AuditEventType.SESSION_FINISH, counts.to_dict())
            audit_path = audit.log_path

        table = Table(title="Decisions by Rule")
        table.add_column("Rule", style="cyan")
        table.add_column("Verdict")
        table.add_column("Events", justify="right")

        for rule in Rule:
            count = counts.by_rule.get(rule, 0)
            if count == 0:
                continue
            label = "[red]drop[/red]" if rule in DROP_RULES else "[green]keep[/green]"
            table.add_row(rule.value, label, str(count))

        console.print(table)

        if show_dropped:
            dropped = Table(title="Dropped Events")
            dropped.add_column("Method")
            dropped.add_column("Status", justify="right")
            dropped.add_column("URL", style="dim")
            dropped.add_column("Rule", style="cyan")
            for event, decision in zip(events, decisions):
                if not decision.kept:
                    dropped.add_row(
                        event.method or "-",
                        str(event.status) if event.status is not None else "-",
                        event.url,
                        decision.rule.value,
                    )
            console.print(dropped)

        console.print(
            f"[green]Kept:[/green] {counts.kept}  "
            f"[red]Dropped:[/red] {counts.dropped}  "
            f"[blue]Reduction:[/blue] {counts.reduction_percentage:.1f}%"
        )

        if output is not None:
            kept_events = [e for e, d in zip(events, decisions) if d.kept]
            path = write_events_jsonl(kept_events, output)
            console.print(f"[green]✓[/green] Kept events written to: {path}")

        if audit_path is not None:
            console.print(f"[dim]Audit log: {audit_path}[/dim]")

    except NetSieveError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def explain(
    url: str = typer.Argument(..., help="Request URL"),
    method: str = typer.Option("GET", "--method", "-m", help="HTTP method"),
    status: Optional[int] = typer.Option(None, "--status", "-s", help="HTTP status code"),
    duration: Optional[float] = typer.Option(
        None,
        "--duration",
        help="Request duration in milliseconds",
    ),
    preset: Optional[PresetName] = typer.Option(
        None,
        "--preset",
        "-p",
        help="Classifier preset (default: balanced)",
        case_sensitive=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Classifier YAML configuration",
        exists=True,
    ),
    own_domain: Optional[List[str]] = typer.Option(
        None,
        "--own-domain",
        "-d",
        help="Additional first-party domain (repeatable)",
    ),
) -> None:
    """
    Show whether a single request would be kept, and which rule decided.
    """
    try:
        classifier = _resolve_classifier(preset, config, own_domain)
    except NetSieveError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    event = RequestEvent(
        url=url,
        method=method,
        status=status,
        request=HttpMessage(),
        response=HttpMessage(),
        duration_ms=duration,
    )
    decision = classifier.explain(event)

    verdict = "[green]KEEP[/green]" if decision.kept else "[red]DROP[/red]"
    console.print(f"{verdict} [dim]({classifier.name})[/dim] rule: [cyan]{decision.rule.value}[/cyan]")


@app.command()
def presets() -> None:
    """List available classifier presets."""
    from netsieve.sanitizer.presets import list_presets

    table = Table(title="Presets")
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for name, description in list_presets():
        table.add_row(name, description)

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]netsieve[/bold cyan] version [yellow]{__version__}[/yellow]")


# ============================================================================
# Entry Point
# ============================================================================

def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
