"""Vault indexing: note files to page records."""

from vault_query.dataview.index.index import (
    DEFAULT_SKIP_DIRS,
    Page,
    Snapshot,
    VaultIndexer,
    build_index,
    build_page,
)
from vault_query.dataview.index.service import IndexService
from vault_query.dataview.index.task_extractor import ListItem, Task, TaskExtractor

__all__ = [
    "DEFAULT_SKIP_DIRS",
    "IndexService",
    "ListItem",
    "Page",
    "Snapshot",
    "Task",
    "TaskExtractor",
    "VaultIndexer",
    "build_index",
    "build_page",
]
