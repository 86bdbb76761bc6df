"""CLI tools for vault-query."""
