"""Main CLI entry point for vault-query."""  # pragma: no cover

from vault_query.cli.app import app  # pragma: no cover

# Register commands
from vault_query.cli.commands import query  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
