"""
IndexService: holds the current Snapshot behind a single swappable reference.
"""

import asyncio
from pathlib import Path

from loguru import logger

from vault_query.config import VaultQueryConfig
from vault_query.dataview.index.index import Snapshot, VaultIndexer


class IndexService:
    """Owns the vault snapshot used for query execution.

    Rebuilding produces a brand-new Snapshot and swaps it in; readers holding
    the previous snapshot keep a consistent view.
    """

    def __init__(self, config: VaultQueryConfig):
        self.config = config
        self._snapshot: Snapshot | None = None

    @classmethod
    def for_vault(cls, vault_path: Path | str, **overrides) -> "IndexService":
        return cls(VaultQueryConfig(vault_path=Path(vault_path), **overrides))

    @property
    def vault_path(self) -> Path:
        return self.config.vault_path

    @property
    def is_built(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Snapshot:
        """The current snapshot, built on first access."""
        if self._snapshot is None:
            return self.rebuild()
        return self._snapshot

    def _indexer(self) -> VaultIndexer:
        return VaultIndexer(
            self.config.vault_path,
            skip_dirs=self.config.skip_dirs,
            ignore_patterns=self.config.ignore_patterns,
            extension=self.config.note_extension,
        )

    def rebuild(self) -> Snapshot:
        """Scan the vault and swap in the new snapshot."""
        logger.debug(f"Rebuilding index for {self.config.vault_path}")
        snapshot = self._indexer().build()
        self._snapshot = snapshot
        return snapshot

    async def refresh(self) -> Snapshot:
        """Rebuild in a worker thread so the event loop is not blocked."""
        snapshot = await asyncio.to_thread(self._indexer().build)
        self._snapshot = snapshot
        return snapshot
