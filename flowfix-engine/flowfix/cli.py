"""FlowFix CLI - repair and inspect LLM-generated n8n workflows."""
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.panel import Panel
from rich.table import Table

from flowfix.config import get_settings
from flowfix.errors import NormalizerError
from flowfix.log import configure_logging
from flowfix.n8n.extraction import extract_json
from flowfix.n8n.normalizer import WorkflowNormalizer
from flowfix.n8n.validator import validate_workflow
from flowfix.utils.workflow_printer import print_workflow

app = typer.Typer(no_args_is_help=True, help="FlowFix CLI: turn LLM output into importable n8n workflows")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log repair details to stderr.")):
    """Configure logging for every command."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else "WARNING",
        json_logs=settings.log_json,
    )


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


@app.command()
def normalize(
    source: str = typer.Argument("-", help="Candidate JSON or LLM reply file, '-' for stdin."),
    out: Optional[Path] = typer.Option(None, help="Write the normalized workflow JSON here."),
    summary: bool = typer.Option(False, help="Print a text summary instead of JSON."),
):
    """Repair a candidate workflow into importable n8n JSON."""
    try:
        candidate = extract_json(_read_source(source))
        report = WorkflowNormalizer.from_settings().repair_with_report(candidate)
    except (OSError, NormalizerError) as e:
        rprint(f"[bold red]Normalization failed:[/] {e}")
        raise typer.Exit(code=1)

    workflow = report.workflow.to_n8n()
    payload = json.dumps(workflow, indent=2, ensure_ascii=False)

    if out:
        out.write_text(payload, encoding="utf-8")
        rprint(Panel.fit(
            f"Saved [bold]{workflow['name']}[/] ({len(workflow['nodes'])} nodes, "
            f"{len(report.repairs)} repairs) to [cyan]{out}[/]"
        ))

    if summary:
        typer.echo(print_workflow(workflow, repairs=report.repairs))
    elif not out:
        typer.echo(payload)


@app.command()
def validate(file: Path):
    """Check an n8n workflow file against the normalized-graph invariants."""
    try:
        workflow = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        rprint(f"[bold red]Could not read workflow:[/] {e}")
        raise typer.Exit(code=1)

    errors = validate_workflow(workflow) if isinstance(workflow, dict) else ["Workflow is not an object"]

    table = Table(title="Validation Report", show_lines=True)
    table.add_column("Status", justify="center", style="bold")
    table.add_column("Message")
    if errors:
        for message in errors:
            table.add_row("ERR", message)
    else:
        table.add_row("OK", f"{len(workflow['nodes'])} nodes, all invariants hold")
    rprint(table)

    if errors:
        raise typer.Exit(code=1)


@app.command()
def serve(host: str = "127.0.0.1", port: int = 8000):
    """Run the normalization API (POST /api/normalize, POST /api/validate)."""
    import uvicorn
    uvicorn.run("flowfix.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    app()
