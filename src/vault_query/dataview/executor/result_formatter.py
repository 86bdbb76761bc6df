"""
Result formatter for Dataview query results.

Turns render items into markdown, and engine values into JSON-safe data.
"""

from typing import Any, Iterable

from vault_query.dataview.results import (
    ErrorResult,
    HeaderResult,
    ListResult,
    ParagraphResult,
    TableResult,
    TaskListResult,
)
from vault_query.dataview.types import Date, Duration, Link, to_string


class ResultFormatter:
    """Formats query results for display."""

    @classmethod
    def format_value(cls, value: Any) -> str:
        """Display form of a single cell or list value."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "✓" if value else "✗"
        return to_string(value)

    @classmethod
    def format_table(cls, item: TableResult) -> str:
        """
        Format a table item as a markdown table.

        Args:
            item: Table render item

        Returns:
            Markdown table string
        """
        lines = []
        if item.group is not None:
            lines.append(f"### {item.group}")

        if not item.rows:
            lines.append("_No results_")
            return "\n".join(lines)

        header = "| " + " | ".join(item.headers) + " |"
        separator = "| " + " | ".join(["---"] * len(item.headers)) + " |"
        lines.extend([header, separator])

        for row in item.rows:
            cells = [cls.format_value(value).replace("|", "\\|") for value in row]
            lines.append("| " + " | ".join(cells) + " |")

        return "\n".join(lines)

    @classmethod
    def format_list(cls, item: ListResult) -> str:
        """Format a list item as a markdown bullet list."""
        lines = []
        if item.group is not None:
            lines.append(f"### {item.group}")

        if not item.items:
            lines.append("_No results_")
        else:
            lines.extend(f"- {cls.format_value(value)}" for value in item.items)

        return "\n".join(lines)

    @classmethod
    def format_task_list(cls, item: TaskListResult) -> str:
        """Format task groups as markdown checklists under a header per group."""
        if not item.groups:
            return "_No tasks_"

        sections = []
        for group in item.groups:
            lines = [f"### {group.name}"]
            lines.extend(f"- [{task.status}] {task.text}" for task in group.tasks)
            sections.append("\n".join(lines))

        return "\n\n".join(sections)

    @classmethod
    def format_item(cls, item: Any) -> str:
        if isinstance(item, TableResult):
            return cls.format_table(item)
        if isinstance(item, ListResult):
            return cls.format_list(item)
        if isinstance(item, TaskListResult):
            return cls.format_task_list(item)
        if isinstance(item, HeaderResult):
            return f"{'#' * max(item.level, 1)} {item.text}"
        if isinstance(item, ParagraphResult):
            return item.text
        if isinstance(item, ErrorResult):
            return f"> [!error] {item.message}"
        return to_string(item)

    @classmethod
    def format_items(cls, items: Iterable[Any]) -> str:
        """Render a whole result as one markdown document."""
        return "\n\n".join(cls.format_item(item) for item in items)

    @classmethod
    def serialize_value(cls, value: Any) -> Any:
        """JSON-safe form of an engine value."""
        if isinstance(value, Date):
            if value.hour or value.minute or value.second:
                return value.to_datetime().isoformat()
            return str(value)
        if isinstance(value, (Link, Duration)):
            return str(value)
        if isinstance(value, list):
            return [cls.serialize_value(v) for v in value]
        if isinstance(value, dict):
            return {str(k): cls.serialize_value(v) for k, v in value.items()}
        return value

    @classmethod
    def serialize_items(cls, items: Iterable[Any]) -> list[dict[str, Any]]:
        """Render items as plain JSON-safe dictionaries."""
        return [cls.serialize_value(item.to_dict()) for item in items]
