"""Query commands: run DQL against a vault, render a note's queries, inspect the index."""

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from vault_query.cli.app import app
from vault_query.config import VaultQueryConfig
from vault_query.dataview.executor.result_formatter import ResultFormatter
from vault_query.dataview.index.service import IndexService
from vault_query.dataview.integration import DataviewIntegration
from vault_query.dataview.results import TableResult

console = Console()

VaultOption = Annotated[
    Optional[Path],
    typer.Option("--vault", help="Vault directory (defaults to VAULT_QUERY_VAULT_PATH)"),
]


def _integration(ctx: typer.Context, vault: Optional[Path]) -> DataviewIntegration:
    config: VaultQueryConfig = ctx.obj if isinstance(ctx.obj, VaultQueryConfig) else VaultQueryConfig()
    if vault is not None:
        config = config.model_copy(update={"vault_path": vault.expanduser()})

    if not config.vault_path.is_dir():
        typer.echo(f"Vault directory not found: {config.vault_path}", err=True)
        raise typer.Exit(1)

    return DataviewIntegration(IndexService(config))


def _print_items(items: list[Any]) -> None:
    """Tables go through rich; everything else is printed as markdown text."""
    for item in items:
        if isinstance(item, TableResult) and item.rows:
            table = Table(title=item.group)
            for header in item.headers:
                table.add_column(header)
            for row in item.rows:
                table.add_row(*(ResultFormatter.format_value(value) for value in row))
            console.print(table)
        else:
            console.print(ResultFormatter.format_item(item), markup=False, highlight=False)


@app.command()
def query(
    ctx: typer.Context,
    query_text: Annotated[str, typer.Argument(help="DQL query, e.g. 'LIST FROM #project'")],
    vault: VaultOption = None,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Note the query runs from; resolves `this`"),
    ] = None,
    json_output: bool = typer.Option(False, "--json", help="Print render items as JSON"),
) -> None:
    """Run a single DQL query against the vault."""
    integration = _integration(ctx, vault)
    items, error = integration.execute_query(query_text, file)

    if json_output:
        typer.echo(json.dumps(ResultFormatter.serialize_items(items), indent=2))
    else:
        _print_items(items)

    if error is not None:
        raise typer.Exit(1)


@app.command()
def render(
    ctx: typer.Context,
    note: Annotated[Path, typer.Argument(help="Note path, absolute or relative to the vault")],
    vault: VaultOption = None,
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Execute every Dataview query found in a note."""
    integration = _integration(ctx, vault)
    note_path = integration.resolve_note_path(note)

    try:
        content = note_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Cannot read note {note_path}: {e}")
        typer.echo(f"Cannot read note: {note_path}", err=True)
        raise typer.Exit(1)

    results = integration.process_note(content, note_path)

    if json_output:
        payload = [
            {**result, "items": ResultFormatter.serialize_items(result["items"])}
            for result in results
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    if not results:
        console.print("[yellow]No Dataview queries found.[/yellow]")
        return

    for result in results:
        status = "[green]ok[/green]" if result["status"] == "success" else "[red]error[/red]"
        console.print(
            f"[bold]{result['query_id']}[/bold] {result['query_type']} "
            f"(line {result['line_number']}) {status}"
        )
        _print_items(result["items"])
        console.print()


@app.command()
def index(
    ctx: typer.Context,
    vault: VaultOption = None,
    json_output: bool = typer.Option(False, "--json", help="Print counts as JSON"),
) -> None:
    """Index the vault and show what was found."""
    integration = _integration(ctx, vault)
    snapshot = integration.index_service.snapshot

    pages = snapshot.all_pages()
    tasks = [task for page in pages for task in page["file"]["tasks"]]
    tags = {tag for page in pages for tag in page["file"]["tags"]}
    stats = {
        "pages": len(pages),
        "tasks": len(tasks),
        "completed_tasks": sum(1 for task in tasks if task.get("completed")),
        "tags": len(tags),
        "outlinks": sum(len(page["file"]["outlinks"]) for page in pages),
    }

    if json_output:
        typer.echo(json.dumps(stats, indent=2))
        return

    table = Table(title=f"Vault: {snapshot.vault_path}")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    for name, count in stats.items():
        table.add_row(name.replace("_", " "), str(count))
    console.print(table)
