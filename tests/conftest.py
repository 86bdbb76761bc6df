"""Common test fixtures: a small vault written into tmp_path."""

from pathlib import Path

import pytest

from vault_query.dataview.index.index import Snapshot, build_index
from vault_query.dataview.index.service import IndexService

NOTE_A = (
    "---\n"
    "status: Active\n"
    "tags: [project, work/alpha]\n"
    "due: 2026-03-01\n"
    "priority: 2\n"
    "aliases:\n"
    "  - Alpha\n"
    "---\n"
    "# A\n"
    "\n"
    "rating:: 5\n"
    "Links to [[B]] and [[Projects/Plan|the plan]].\n"
    "\n"
    "- [ ] write report [due:: 2026-02-01] #urgent\n"
    "- [x] send email\n"
    "- plain item\n"
)

NOTE_B = (
    "---\n"
    "status: Done\n"
    "tags: project\n"
    "priority: 1\n"
    "---\n"
    "Back to [[A]].\n"
    "- [ ] review A\n"
)

NOTE_PLAN = (
    "---\n"
    "status: Active\n"
    "priority: 3\n"
    "---\n"
    "Plan body with #idea tag.\n"
    "owner:: [[B]]\n"
)

NOTE_C = "- [ ] buy milk [due:: 2026-01-01]\n"


def _write(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def vault(tmp_path) -> Path:
    """A four-note vault plus files the indexer must skip."""
    root = tmp_path / "vault"
    root.mkdir()
    _write(root, "A.md", NOTE_A)
    _write(root, "B.md", NOTE_B)
    _write(root, "Projects/Plan.md", NOTE_PLAN)
    _write(root, "C.md", NOTE_C)
    _write(root, ".obsidian/workspace.md", "status:: Hidden\n")
    _write(root, "notes.txt", "status:: Text\n")
    return root


@pytest.fixture
def write_note():
    """Helper for adding notes to a vault inside a test."""
    return _write


@pytest.fixture
def snapshot(vault) -> Snapshot:
    return build_index(vault)


@pytest.fixture
def index_service(vault) -> IndexService:
    return IndexService.for_vault(vault)
