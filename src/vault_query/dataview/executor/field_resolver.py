"""
Field resolver for Dataview queries.

Resolves dotted field references like 'status', 'file.name' or
'file.link.display' against page data.
"""

from typing import Any

from vault_query.dataview.types import Date, Duration, Link


class FieldResolver:
    """Resolves field values from page data."""

    LINK_ATTRIBUTES = ("path", "display", "embed")
    DATE_ATTRIBUTES = ("year", "month", "day", "hour", "minute", "second")
    DURATION_ATTRIBUTES = ("years", "months", "weeks", "days", "hours", "minutes", "seconds")

    @classmethod
    def get_attribute(cls, value: Any, key: str) -> Any:
        """One step of a field path. Missing keys and scalars give None."""
        if isinstance(value, dict):
            return value.get(key)
        if isinstance(value, Link) and key in cls.LINK_ATTRIBUTES:
            return getattr(value, key)
        if isinstance(value, Date) and key in cls.DATE_ATTRIBUTES:
            return getattr(value, key)
        if isinstance(value, Duration) and key in cls.DURATION_ATTRIBUTES:
            return getattr(value, key)
        return None

    @classmethod
    def resolve_path(cls, value: Any, path: list[str]) -> Any:
        """
        Walk a dotted path starting at value.

        Args:
            value: Starting value, usually a page dictionary
            path: Path segments, e.g. ['file', 'name']

        Returns:
            Field value or None if any step is missing
        """
        for key in path:
            if value is None:
                return None
            value = cls.get_attribute(value, key)
        return value

    @classmethod
    def resolve_field(cls, page: dict[str, Any], field_name: str) -> Any:
        """Resolve a dotted field name such as 'file.name'."""
        return cls.resolve_path(page, field_name.split("."))

    @classmethod
    def has_field(cls, page: dict[str, Any], field_name: str) -> bool:
        """Check if a page has a top-level field (present even when null)."""
        return field_name.split(".", 1)[0] in page

    @staticmethod
    def with_path(page: dict[str, Any], path: list[str], value: Any) -> dict[str, Any]:
        """Copy of page with value stored at path. Nested dicts are copied, not mutated."""
        copy = dict(page)
        if len(path) == 1:
            copy[path[0]] = value
            return copy

        head = path[0]
        child = copy.get(head)
        copy[head] = FieldResolver.with_path(child if isinstance(child, dict) else {}, path[1:], value)
        return copy

    @staticmethod
    def task_context(page: dict[str, Any], task: dict[str, Any]) -> dict[str, Any]:
        """Page fields overlaid with the task's fields; task fields win on conflicts."""
        context = dict(page)
        context.update(task)
        return context
