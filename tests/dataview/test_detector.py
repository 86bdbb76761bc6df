"""Tests for Dataview Detector."""

from vault_query.dataview.detector import DataviewBlock, DataviewDetector


class TestDetectorCodeblocks:
    """Test detection of codeblock queries."""

    def test_detect_single_codeblock(self):
        """Test detecting single codeblock."""
        content = """# Note

```dataview
LIST FROM "1. projects"
```
"""
        blocks = DataviewDetector.detect_queries(content)
        assert len(blocks) == 1
        assert blocks[0].block_type == "codeblock"
        assert blocks[0].query == 'LIST FROM "1. projects"'
        assert blocks[0].start_line == 2
        assert blocks[0].end_line == 4

    def test_detect_multiple_codeblocks(self):
        """Test detecting multiple codeblocks."""
        content = """# Note

```dataview
LIST FROM "1. projects"
```

Some text.

```dataview
TABLE title, status
```
"""
        blocks = DataviewDetector.detect_queries(content)
        assert len(blocks) == 2
        assert blocks[0].query == 'LIST FROM "1. projects"'
        assert blocks[1].query == "TABLE title, status"

    def test_multiline_query(self):
        """Query lines are joined with newlines."""
        content = "```dataview\nTABLE status\nFROM #project\nSORT file.name\n```"
        blocks = DataviewDetector.detect_queries(content)
        assert blocks[0].query == "TABLE status\nFROM #project\nSORT file.name"

    def test_indented_fences(self):
        content = "  ```dataview\n  LIST\n  ```"
        blocks = DataviewDetector.detect_queries(content)
        assert len(blocks) == 1
        assert blocks[0].query == "  LIST"

    def test_unclosed_codeblock_is_ignored(self):
        content = "```dataview\nLIST FROM #project\n"
        assert DataviewDetector.detect_queries(content) == []

    def test_other_languages_are_ignored(self):
        content = "```python\nprint('hi')\n```\n\n```dataviewjs\ndv.list([])\n```"
        assert DataviewDetector.detect_queries(content) == []

    def test_empty_codeblock(self):
        blocks = DataviewDetector.detect_queries("```dataview\n```")
        assert len(blocks) == 1
        assert blocks[0].query == ""


class TestDetectorInline:
    """Test detection of inline `= expr` queries."""

    def test_inline_query(self):
        blocks = DataviewDetector.detect_queries("Status is `= this.status` today.")
        assert len(blocks) == 1
        assert blocks[0].block_type == "inline"
        assert blocks[0].query == "this.status"
        assert blocks[0].start_line == blocks[0].end_line == 0

    def test_several_inline_queries_on_one_line(self):
        blocks = DataviewDetector.detect_queries("`= 1 + 1` and `=this.file.name`")
        assert [b.query for b in blocks] == ["1 + 1", "this.file.name"]

    def test_plain_code_spans_are_not_queries(self):
        assert DataviewDetector.detect_queries("Use `git status` here.") == []

    def test_inline_inside_fenced_code_is_ignored(self):
        content = "```\n`= this.status`\n```\n`= this.priority`"
        blocks = DataviewDetector.detect_queries(content)
        assert [b.query for b in blocks] == ["this.priority"]
        assert blocks[0].start_line == 3

    def test_codeblocks_come_before_inline(self):
        content = "`= this.status`\n\n```dataview\nLIST\n```"
        blocks = DataviewDetector.detect_queries(content)
        assert [b.block_type for b in blocks] == ["codeblock", "inline"]


class TestDetectorHelpers:
    """Test convenience methods."""

    def test_has_dataview_queries(self):
        assert DataviewDetector.has_dataview_queries("```dataview\nLIST\n```")
        assert DataviewDetector.has_dataview_queries("`= 1`")
        assert not DataviewDetector.has_dataview_queries("# Just a note")

    def test_extract_query_text(self):
        content = "```dataview\nLIST\n```\n\n```dataview\nTASK\n```"
        assert DataviewDetector.extract_query_text(content) == ["LIST", "TASK"]

    def test_block_repr(self):
        block = DataviewBlock(query="LIST", start_line=1, end_line=3, block_type="codeblock")
        assert repr(block) == "DataviewBlock(type=codeblock, lines=1-3)"
