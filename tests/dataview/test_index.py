"""Tests for vault indexing and source resolution."""

import os

from vault_query.dataview.ast import AndSource, FolderSource, NotSource, OrSource, TagSource
from vault_query.dataview.index.index import VaultIndexer, build_index, build_page
from vault_query.dataview.types import Date, Link


def paths(pages):
    return sorted(page["file"]["path"] for page in pages)


class TestVaultScan:
    """Test which files become pages."""

    def test_indexes_markdown_files_only(self, snapshot):
        assert sorted(snapshot.pages) == ["A.md", "B.md", "C.md", "Projects/Plan.md"]
        assert len(snapshot) == 4

    def test_custom_skip_dirs(self, vault):
        snapshot = build_index(vault, skip_dirs=["Projects"])
        assert "Projects/Plan.md" not in snapshot.pages
        assert ".obsidian/workspace.md" in snapshot.pages

    def test_ignore_patterns(self, vault):
        snapshot = build_index(vault, ignore_patterns=["Projects/", "C.md"])
        assert sorted(snapshot.pages) == ["A.md", "B.md"]

    def test_custom_extension(self, vault):
        snapshot = build_index(vault, extension=".txt")
        assert list(snapshot.pages) == ["notes.txt"]
        assert snapshot.pages["notes.txt"]["status"] == "Text"

    def test_unreadable_file_is_skipped(self, vault):
        (vault / "bad.md").write_bytes(b"\xff\xfe\x00bad")
        snapshot = build_index(vault)
        assert "bad.md" not in snapshot.pages
        assert len(snapshot) == 4

    def test_empty_vault(self, tmp_path):
        assert len(build_index(tmp_path)) == 0

    def test_scan_lists_relative_posix_paths(self, vault):
        scanned = [rel for _, rel in VaultIndexer(vault).scan()]
        assert sorted(scanned) == ["A.md", "B.md", "C.md", "Projects/Plan.md"]


class TestPageRecords:
    """Test the page record built for each note."""

    def test_file_metadata(self, snapshot):
        file = snapshot.get_page("Projects/Plan.md")["file"]
        assert file["name"] == "Plan"
        assert file["folder"] == "Projects"
        assert file["ext"] == ".md"
        assert file["link"] == Link("Projects/Plan")
        assert file["link"].display == "Plan"
        assert file["size"] > 0
        assert isinstance(file["mtime"], Date)
        assert isinstance(file["ctime"], Date)

    def test_frontmatter_fields_are_top_level(self, snapshot):
        page = snapshot.get_page("A.md")
        assert page["status"] == "Active"
        assert page["priority"] == 2
        assert page["due"] == Date(2026, 3, 1)
        assert page["aliases"] == ["Alpha"]
        assert "tags" not in page
        assert page["file"]["frontmatter"]["tags"] == ["project", "work/alpha"]

    def test_inline_fields(self, snapshot):
        assert snapshot.get_page("A.md")["rating"] == 5
        assert snapshot.get_page("Projects/Plan.md")["owner"] == Link("B")

    def test_tags(self, snapshot):
        file = snapshot.get_page("A.md")["file"]
        assert file["tags"] == ["project", "urgent", "work", "work/alpha"]
        assert file["etags"] == ["project", "work/alpha", "urgent"]

    def test_tasks_and_lists(self, snapshot):
        file = snapshot.get_page("A.md")["file"]
        assert [t["text"] for t in file["tasks"]] == [
            "write report [due:: 2026-02-01] #urgent",
            "send email",
        ]
        first = file["tasks"][0]
        assert first["line"] == 14
        assert first["due"] == Date(2026, 2, 1)
        assert first["tags"] == ["urgent"]
        assert file["tasks"][1]["completed"] is True
        assert [item["text"] for item in file["lists"]][-1] == "plain item"

    def test_task_with_inline_field(self, snapshot):
        task = snapshot.get_page("C.md")["file"]["tasks"][0]
        assert task["completed"] is False
        assert task["status"] == " "
        assert task["due"] == Date(2026, 1, 1)
        assert "due" not in snapshot.get_page("C.md")

    def test_outlinks(self, snapshot):
        outlinks = snapshot.get_page("A.md")["file"]["outlinks"]
        assert outlinks == [Link("B"), Link("Projects/Plan")]
        assert outlinks[1].display == "the plan"

    def test_inlinks(self, snapshot):
        def inlink_paths(path):
            return sorted(link.path for link in snapshot.get_page(path)["file"]["inlinks"])

        assert inlink_paths("A.md") == ["B"]
        assert inlink_paths("B.md") == ["A", "Projects/Plan"]
        assert inlink_paths("Projects/Plan.md") == ["A"]
        assert inlink_paths("C.md") == []

    def test_daily_note_day(self, vault, write_note):
        write_note(vault, "journal/2026-02-14 notes.md", "text")
        page = build_index(vault).get_page("journal/2026-02-14 notes.md")
        assert page["file"]["day"] == Date(2026, 2, 14)
        assert build_index(vault).get_page("A.md")["file"]["day"] is None

    def test_file_key_is_protected(self):
        stat = os.stat(__file__)
        page = build_page("x.md", "---\nfile: fake\n---\nfile:: also fake\n", stat)
        assert isinstance(page["file"], dict)
        assert page["file"]["name"] == "x"

    def test_self_links_are_not_inlinks(self, vault, write_note):
        write_note(vault, "Self.md", "I link to [[Self]].")
        page = build_index(vault).get_page("Self.md")
        assert page["file"]["inlinks"] == []


class TestSourceResolution:
    """Test FROM source evaluation on a snapshot."""

    def test_folder(self, snapshot):
        assert paths(snapshot.resolve_source(FolderSource(path="Projects"))) == ["Projects/Plan.md"]

    def test_folder_prefix_needs_full_segment(self, vault, write_note):
        write_note(vault, "ProjectsArchive/Old.md", "old")
        snapshot = build_index(vault)
        assert paths(snapshot.resolve_source(FolderSource(path="Projects"))) == ["Projects/Plan.md"]

    def test_empty_folder_selects_everything(self, snapshot):
        assert len(snapshot.resolve_source(FolderSource(path=""))) == 4

    def test_tag_matches_subtags(self, snapshot):
        assert paths(snapshot.resolve_source(TagSource(tag="work"))) == ["A.md"]
        assert paths(snapshot.resolve_source(TagSource(tag="project"))) == ["A.md", "B.md"]

    def test_and_or_not(self, snapshot):
        project = TagSource(tag="project")
        idea = TagSource(tag="idea")
        assert paths(snapshot.resolve_source(OrSource(left=project, right=idea))) == [
            "A.md",
            "B.md",
            "Projects/Plan.md",
        ]
        assert paths(snapshot.resolve_source(AndSource(left=project, right=TagSource(tag="urgent")))) == [
            "A.md"
        ]
        assert paths(snapshot.resolve_source(NotSource(operand=project))) == ["C.md", "Projects/Plan.md"]

    def test_current_page(self, snapshot, vault):
        assert snapshot.current_page(vault / "A.md")["file"]["name"] == "A"
        assert snapshot.current_page(vault.parent / "elsewhere.md") is None
        assert snapshot.current_page(None) is None
