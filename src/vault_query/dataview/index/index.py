"""
Vault index: scans note files into page records and answers source queries.

A page is a plain dict::

    {
        "file": {"name", "path", "folder", "ext", "link", "ctime", "mtime",
                 "size", "tags", "etags", "outlinks", "inlinks", "tasks",
                 "lists", "day", "frontmatter"},
        <frontmatter fields except tags>,
        <inline body fields>,
    }

A Snapshot is built once and never mutated afterwards.
"""

import os
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import pathspec
from loguru import logger

from vault_query.config import DEFAULT_SKIP_DIRS
from vault_query.dataview.ast import (
    AndSource,
    FolderSource,
    NotSource,
    OrSource,
    SourceNode,
    TagSource,
)
from vault_query.dataview.index.extractors import extract_inline_fields, extract_links, extract_tags
from vault_query.dataview.index.frontmatter import parse_note_header
from vault_query.dataview.index.task_extractor import TaskExtractor
from vault_query.dataview.types import Date, Link

DAY_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})")

Page = dict[str, Any]


@dataclass
class Snapshot:
    """Immutable view of every indexed page, keyed by vault-relative path."""

    vault_path: Path
    pages: dict[str, Page] = field(default_factory=dict)
    extension: str = ".md"

    def __len__(self) -> int:
        return len(self.pages)

    def all_pages(self) -> list[Page]:
        return list(self.pages.values())

    def get_page(self, path: str) -> Page | None:
        """Page by vault-relative path, e.g. "Projects/Alpha.md"."""
        return self.pages.get(path)

    def current_page(self, abs_path: str | Path | None) -> Page | None:
        """Page for an absolute file path, or None when it lies outside the vault."""
        if not abs_path:
            return None
        try:
            relative = Path(os.path.abspath(abs_path)).relative_to(
                os.path.abspath(self.vault_path)
            )
        except ValueError:
            return None
        return self.pages.get(relative.as_posix())

    def pages_in_folder(self, folder: str) -> list[Page]:
        """Pages in the folder or any folder below it. "" matches every page."""
        folder = folder.strip().rstrip("/")
        if not folder:
            return self.all_pages()
        prefix = folder + "/"
        return [
            page
            for page in self.pages.values()
            if page["file"]["folder"] == folder or page["file"]["folder"].startswith(prefix)
        ]

    def pages_with_tag(self, tag: str) -> list[Page]:
        """Pages carrying the tag or one of its subtags (`project` matches `project/active`)."""
        tag = tag.lstrip("#")
        prefix = tag + "/"
        return [
            page
            for page in self.pages.values()
            if any(t == tag or t.startswith(prefix) for t in page["file"]["tags"])
        ]

    def resolve_source(self, source: SourceNode) -> list[Page]:
        """Evaluate a FROM clause into pages. Set operations key pages by path."""
        if isinstance(source, FolderSource):
            return self.pages_in_folder(source.path)
        if isinstance(source, TagSource):
            return self.pages_with_tag(source.tag)
        if isinstance(source, OrSource):
            return _union(self.resolve_source(source.left), self.resolve_source(source.right))
        if isinstance(source, AndSource):
            return _intersect(self.resolve_source(source.left), self.resolve_source(source.right))
        if isinstance(source, NotSource):
            return _difference(self.all_pages(), self.resolve_source(source.operand))
        return []


def _paths(pages: Iterable[Page]) -> set[str]:
    return {page["file"]["path"] for page in pages}


def _union(left: list[Page], right: list[Page]) -> list[Page]:
    seen: set[str] = set()
    result = []
    for page in left + right:
        path = page["file"]["path"]
        if path not in seen:
            seen.add(path)
            result.append(page)
    return result


def _intersect(left: list[Page], right: list[Page]) -> list[Page]:
    keep = _paths(right)
    return [page for page in left if page["file"]["path"] in keep]


def _difference(left: list[Page], right: list[Page]) -> list[Page]:
    drop = _paths(right)
    return [page for page in left if page["file"]["path"] not in drop]


class VaultIndexer:
    """Builds a Snapshot from a vault directory."""

    def __init__(
        self,
        vault_path: Path | str,
        skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
        ignore_patterns: Iterable[str] = (),
        extension: str = ".md",
    ):
        self.vault_path = Path(vault_path).expanduser()
        self.skip_dirs = set(skip_dirs)
        self.ignore_spec = pathspec.PathSpec.from_lines("gitwildmatch", list(ignore_patterns))
        self.extension = extension

    def build(self) -> Snapshot:
        """Scan every note, then compute inlinks once all pages exist."""
        start = time.perf_counter()
        snapshot = Snapshot(vault_path=self.vault_path, extension=self.extension)

        for abs_path, rel_path in self.scan():
            page = self.index_file(abs_path, rel_path)
            if page is not None:
                snapshot.pages[rel_path] = page

        self.compute_inlinks(snapshot)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Indexed {len(snapshot.pages)} pages from {self.vault_path} in {elapsed_ms:.0f}ms")
        return snapshot

    def scan(self) -> list[tuple[Path, str]]:
        """Recursively list note files as (absolute path, vault-relative POSIX path).

        Order follows the filesystem's directory listing order.
        """
        found: list[tuple[Path, str]] = []
        pending = [(self.vault_path, "")]

        while pending:
            directory, rel_dir = pending.pop(0)
            try:
                entries = list(os.scandir(directory))
            except OSError as e:
                logger.warning(f"Cannot scan directory {directory}: {e}")
                continue

            subdirs = []
            for entry in entries:
                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name

                if entry.is_dir(follow_symlinks=False):
                    if entry.name in self.skip_dirs or self.ignore_spec.match_file(rel_path + "/"):
                        logger.trace(f"Skipping directory: {rel_path}")
                        continue
                    subdirs.append((Path(entry.path), rel_path))
                elif entry.is_file() and entry.name.endswith(self.extension):
                    if self.ignore_spec.match_file(rel_path):
                        logger.trace(f"Ignoring file: {rel_path}")
                        continue
                    found.append((Path(entry.path), rel_path))

            pending[0:0] = subdirs

        return found

    def index_file(self, abs_path: Path, rel_path: str) -> Page | None:
        """Build the page for one note. Unreadable files are skipped."""
        try:
            stat = abs_path.stat()
            content = abs_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable file {rel_path}: {e}")
            return None

        return build_page(rel_path, content, stat, self.extension)

    @staticmethod
    def compute_inlinks(snapshot: Snapshot) -> None:
        """Register every resolvable outlink as an inlink of its target.

        Self-links and unresolved links are ignored.
        """
        by_name: dict[str, Page] = {}
        by_path: dict[str, Page] = {}
        extension = snapshot.extension

        for page in snapshot.pages.values():
            # Duplicate names across folders: the first page scanned wins
            by_name.setdefault(page["file"]["name"].lower(), page)
            by_path[_strip_extension(page["file"]["path"], extension).lower()] = page

        for source in snapshot.pages.values():
            source_file = source["file"]
            for link in source_file["outlinks"]:
                target = resolve_link_target(link, by_name, by_path, extension)
                if target is None or target["file"]["path"] == source_file["path"]:
                    continue
                target["file"]["inlinks"].append(
                    Link(_strip_extension(source_file["path"], extension), source_file["name"])
                )


def resolve_link_target(
    link: Link, by_name: dict[str, Page], by_path: dict[str, Page], extension: str = ".md"
) -> Page | None:
    """Resolve a link by exact path, then path minus extension, then bare file name."""
    raw = link.path.split("#", 1)[0].strip()
    if not raw:
        return None

    lower = raw.lower()
    if lower in by_path:
        return by_path[lower]

    without_ext = _strip_extension(lower, extension)
    if without_ext in by_path:
        return by_path[without_ext]

    return by_name.get(without_ext.rsplit("/", 1)[-1])


def _strip_extension(path: str, extension: str) -> str:
    return path[: -len(extension)] if extension and path.endswith(extension) else path


def _stat_date(timestamp: float) -> Date:
    return Date.from_datetime(datetime.fromtimestamp(timestamp))


def build_page(rel_path: str, content: str, stat: os.stat_result, extension: str = ".md") -> Page:
    """Assemble the page record for one note's content."""
    frontmatter, body = parse_note_header(content)
    # Lines taken up by the header, so task line numbers refer to the file
    header_lines = content[: len(content) - len(body)].count("\n")

    tags, explicit_tags = extract_tags(frontmatter, body)
    tasks, items = TaskExtractor.extract(body, first_line=header_lines + 1)

    path_without_ext = _strip_extension(rel_path, extension)
    name = path_without_ext.rsplit("/", 1)[-1]
    folder = rel_path.rsplit("/", 1)[0] if "/" in rel_path else ""
    day_match = DAY_PATTERN.match(name)

    file_info = {
        "name": name,
        "path": rel_path,
        "folder": folder,
        "ext": extension,
        "link": Link(path_without_ext, name),
        "ctime": _stat_date(getattr(stat, "st_birthtime", stat.st_ctime)),
        "mtime": _stat_date(stat.st_mtime),
        "size": stat.st_size,
        "tags": tags,
        "etags": explicit_tags,
        "outlinks": extract_links(content),
        "inlinks": [],
        "tasks": [task.to_dict() for task in tasks],
        "lists": [item.to_dict() for item in items],
        "day": Date.parse(day_match.group(1)) if day_match else None,
        "frontmatter": frontmatter,
    }

    page: Page = {"file": file_info}
    for key, value in frontmatter.items():
        if key not in ("tags", "file"):
            page[key] = value
    for key, value in extract_inline_fields(body).items():
        if key != "file":
            page[key] = value
    return page


def build_index(
    vault_path: Path | str,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    ignore_patterns: Iterable[str] = (),
    extension: str = ".md",
) -> Snapshot:
    """Scan a vault and return a fresh Snapshot."""
    return VaultIndexer(vault_path, skip_dirs, ignore_patterns, extension).build()
