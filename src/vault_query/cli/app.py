from typing import Optional

import typer

from vault_query.config import VaultQueryConfig
from vault_query.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import vault_query

        typer.echo(f"vault-query version: {vault_query.__version__}")
        raise typer.Exit()


app = typer.Typer(name="vault-query")


@app.callback()
def app_callback(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (defaults to VAULT_QUERY_LOG_LEVEL or INFO)",
    ),
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        help="Also write a rotating debug log to this file",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """vault-query - Dataview queries over a folder of markdown notes."""
    config = VaultQueryConfig()
    setup_logging(log_level or config.log_level, log_file)
    ctx.obj = config
