"""Tests for ResultFormatter."""

import json

from pydantic import TypeAdapter

from vault_query.dataview.executor.result_formatter import ResultFormatter
from vault_query.dataview.results import (
    ErrorResult,
    HeaderResult,
    ListResult,
    ParagraphResult,
    RenderItem,
    TableResult,
    TaskGroup,
    TaskItem,
    TaskListResult,
)
from vault_query.dataview.types import Date, Duration, Link


class TestResultFormatterTable:
    """Test formatting table results."""

    def test_format_simple_table(self):
        """Test formatting simple table."""
        item = TableResult(
            headers=["File", "status"],
            rows=[[Link("Note 1"), "active"], [Link("Note 2"), "archived"]],
        )
        output = ResultFormatter.format_table(item)

        assert "| File | status |" in output
        assert "| --- | --- |" in output
        assert "| [[Note 1]] | active |" in output
        assert "| [[Note 2]] | archived |" in output

    def test_format_table_values(self):
        """Numbers, dates, booleans and nulls get their display form."""
        item = TableResult(
            headers=["n", "d", "b", "x"],
            rows=[[2.5, Date(2026, 1, 15), True, None]],
        )
        output = ResultFormatter.format_table(item)
        assert "| 2.5 | 2026-01-15 | ✓ |  |" in output

    def test_pipes_in_cells_are_escaped(self):
        item = TableResult(headers=["File"], rows=[[Link("A", "alias")]])
        assert "| [[A\\|alias]] |" in ResultFormatter.format_table(item)

    def test_empty_table(self):
        output = ResultFormatter.format_table(TableResult(headers=["File"]))
        assert output == "_No results_"

    def test_grouped_table(self):
        item = TableResult(headers=["File"], rows=[[Link("A")]], group="Active")
        assert ResultFormatter.format_table(item).startswith("### Active\n| File |")


class TestResultFormatterList:
    """Test formatting list results."""

    def test_format_simple_list(self):
        item = ListResult(items=[Link("A"), "text", 3])
        assert ResultFormatter.format_list(item) == "- [[A]]\n- text\n- 3"

    def test_list_values(self):
        item = ListResult(items=[["a", "b"], Duration(days=2)])
        assert ResultFormatter.format_list(item) == "- a, b\n- 2 days"

    def test_empty_list(self):
        assert ResultFormatter.format_list(ListResult()) == "_No results_"

    def test_grouped_list(self):
        item = ListResult(items=[Link("A")], group="2")
        assert ResultFormatter.format_list(item) == "### 2\n- [[A]]"


class TestResultFormatterTasks:
    """Test formatting task lists."""

    def test_format_task_list(self):
        item = TaskListResult(
            groups=[
                TaskGroup(
                    name="[[A|A]]",
                    tasks=[
                        TaskItem(text="write report", status=" "),
                        TaskItem(text="send email", status="x", completed=True),
                    ],
                ),
                TaskGroup(name="[[B|B]]", tasks=[TaskItem(text="review", status="/")]),
            ]
        )
        output = ResultFormatter.format_task_list(item)
        assert output == (
            "### [[A|A]]\n- [ ] write report\n- [x] send email\n\n### [[B|B]]\n- [/] review"
        )

    def test_no_tasks(self):
        assert ResultFormatter.format_task_list(TaskListResult()) == "_No tasks_"


class TestResultFormatterItems:
    """Test formatting of other render items and whole results."""

    def test_header_paragraph_error(self):
        assert ResultFormatter.format_item(HeaderResult(level=3, text="Title")) == "### Title"
        assert ResultFormatter.format_item(ParagraphResult(text="hello")) == "hello"
        assert ResultFormatter.format_item(ErrorResult(message="boom")) == "> [!error] boom"

    def test_format_items_joins_with_blank_line(self):
        items = [HeaderResult(level=1, text="T"), ParagraphResult(text="p")]
        assert ResultFormatter.format_items(items) == "# T\n\np"

    def test_format_items_empty(self):
        assert ResultFormatter.format_items([]) == ""


class TestSerialization:
    """Test JSON-safe conversion."""

    def test_serialize_value(self):
        assert ResultFormatter.serialize_value(Date(2026, 1, 15)) == "2026-01-15"
        assert ResultFormatter.serialize_value(Date(2026, 1, 15, 9, 30)) == "2026-01-15T09:30:00"
        assert ResultFormatter.serialize_value(Link("A", "x")) == "[[A|x]]"
        assert ResultFormatter.serialize_value(Duration(hours=1)) == "1 hour"
        assert ResultFormatter.serialize_value({"d": [Date(2026, 2, 1)]}) == {"d": ["2026-02-01"]}
        assert ResultFormatter.serialize_value(None) is None

    def test_serialize_items(self):
        items = [
            TableResult(headers=["File", "due"], rows=[[Link("A"), Date(2026, 3, 1)]]),
            TaskListResult(groups=[TaskGroup(name="g", tasks=[TaskItem(text="t")])]),
        ]
        data = ResultFormatter.serialize_items(items)
        assert data == [
            {"type": "table", "headers": ["File", "due"], "rows": [["[[A]]", "2026-03-01"]]},
            {
                "type": "task_list",
                "groups": [
                    {"name": "g", "tasks": [{"text": "t", "status": " ", "completed": False}]}
                ],
            },
        ]
        json.dumps(data)

    def test_to_dict_keeps_engine_values(self):
        item = ListResult(items=[Link("A")], group="g")
        assert item.to_dict() == {"type": "list", "items": [Link("A")], "group": "g"}

    def test_to_dict_omits_unset_group(self):
        assert "group" not in ListResult(items=[]).to_dict()

    def test_render_item_union_dispatches_on_type(self):
        adapter = TypeAdapter(RenderItem)
        item = adapter.validate_python({"type": "error", "message": "boom"})
        assert isinstance(item, ErrorResult)
        table = adapter.validate_python({"type": "table", "headers": ["File"], "rows": [["x"]]})
        assert isinstance(table, TableResult)
        assert table.group is None
