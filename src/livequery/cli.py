"""livequery CLI.

`livequery render` prints the subscription query for a table and predicate;
`livequery replay` runs a scenario directory through live views.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from pydantic import TypeAdapter, ValidationError

from livequery.config import settings
from livequery.contracts.filters import FilterExpr
from livequery.orchestrator.replay import run_scenario
from livequery.query.render import build_select
from livequery.util.logging import configure_logging

# Force a command group so the UX is always `livequery <command> ...`
app = typer.Typer(add_completion=False, no_args_is_help=True)

_filter_adapter = TypeAdapter(FilterExpr)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LIVEQUERY_LOG_LEVEL"),
) -> None:
    """livequery CLI."""
    configure_logging(log_level)


def _load_where(where: Optional[str]) -> Optional[FilterExpr]:
    if where is None:
        return None
    raw = where if where.lstrip().startswith("{") else Path(where).read_text()
    return _filter_adapter.validate_python(json.loads(raw))


@app.command()
def render(
    table: str = typer.Option(..., "--table", "-t", help="Table name"),
    where: Optional[str] = typer.Option(
        None, "--where", "-w", help="Predicate as JSON, or a path to a JSON file"
    ),
) -> None:
    """Print the query a view over TABLE would subscribe with."""
    try:
        expr = _load_where(where)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        typer.echo(f"Invalid predicate: {e}")
        raise typer.Exit(1)
    typer.echo(build_select(table, expr))


@app.command()
def replay(
    data: Path = typer.Option(Path("data/demo"), "--data", "-d", help="Path to scenario directory"),
    trace: bool = typer.Option(False, "--trace", help="Print each view's trace (also LIVEQUERY_TRACE_VIEWS)"),
) -> None:
    """Replay a scenario and show what each view saw."""

    if not data.exists():
        typer.echo(f"Scenario directory not found: {data}")
        raise typer.Exit(1)

    outcome = run_scenario(data, trace=True if trace else None)
    for w in outcome.warnings:
        typer.echo(f"warning: {w.message}")
    if not outcome.ok or outcome.data is None:
        typer.echo("\n".join(str(e) for e in outcome.errors))
        raise typer.Exit(1)

    for view in outcome.data.views:
        typer.echo(f"== {view.name} [{view.state}]")
        typer.echo(view.query)
        for entry in view.log:
            detail = {k: v for k, v in entry.items() if k != "event"}
            typer.echo(f"  {entry['event']}: {detail}")
        typer.echo(f"  recomputes: {view.recomputes}")
        df = pd.DataFrame(view.rows)
        if df.empty:
            typer.echo("  (no rows)")
        else:
            typer.echo(df.head(settings.LIVEQUERY_PREVIEW_ROWS).to_string(index=False))

    for name, view_trace in outcome.trace.get("views", {}).items():
        typer.echo(f"== trace {name}")
        typer.echo(f"  totals: {view_trace['totals']}")
        for event in view_trace["events"]:
            typer.echo(f"  [{event['timestamp']}] {event['type']} {event['data']}")
