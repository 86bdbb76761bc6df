"""
Task and list item extraction.

Extracts checkbox tasks and plain list items from markdown content.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from vault_query.dataview.index.extractors import (
    expand_tags,
    extract_bracketed_fields,
    find_tags,
)


@dataclass
class Task:
    """A task extracted from markdown."""

    text: str
    status: str
    line_number: int
    tags: list[str] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.status in ("x", "X")

    def to_dict(self) -> dict[str, Any]:
        """Convert to the task object seen by queries.

        Inline fields are merged in but never replace the built-in keys.
        """
        task = dict(self.fields)
        task.update(
            {
                "text": self.text,
                "completed": self.completed,
                "status": self.status,
                "line": self.line_number,
                "tags": self.tags,
            }
        )
        return task


@dataclass
class ListItem:
    """A list item (tasks included)."""

    text: str
    line_number: int
    task: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "line": self.line_number, "task": self.task}


class TaskExtractor:
    """Extracts tasks and list items from markdown content."""

    FENCE_PATTERN = re.compile(r"^\s*```")
    LIST_PATTERN = re.compile(r"^\s*[-*] (.*)$")
    TASK_PATTERN = re.compile(r"^\s*[-*] \[(.)\] (.*)$")

    @classmethod
    def extract(cls, content: str, first_line: int = 1) -> tuple[list[Task], list[ListItem]]:
        """
        Extract all tasks and list items from markdown content.

        Lines inside fenced code blocks are ignored; every fence line toggles
        the fenced state.

        Args:
            content: Markdown content
            first_line: Line number of the first line of ``content`` in its file

        Returns:
            Tuple of (tasks, list items). Every task also appears as a list item.
        """
        tasks = []
        items = []
        in_fence = False

        for line_num, line in enumerate(content.split("\n"), start=first_line):
            line = line.rstrip("\r")
            if cls.FENCE_PATTERN.match(line):
                in_fence = not in_fence
            if in_fence:
                continue

            task_match = cls.TASK_PATTERN.match(line)
            if task_match:
                status, text = task_match.groups()
                tasks.append(cls.parse_task(text, status, line_num))
                items.append(ListItem(text=text, line_number=line_num, task=True))
                continue

            list_match = cls.LIST_PATTERN.match(line)
            if list_match:
                items.append(ListItem(text=list_match.group(1), line_number=line_num))

        return tasks, items

    @classmethod
    def extract_tasks(cls, content: str) -> list[Task]:
        """Extract only the tasks from markdown content."""
        tasks, _ = cls.extract(content)
        return tasks

    @staticmethod
    def parse_task(text: str, status: str, line_number: int) -> Task:
        """Parse the text after `- [x] ` into a Task with its own fields and tags."""
        return Task(
            text=text,
            status=status,
            line_number=line_number,
            tags=expand_tags(find_tags(text)),
            fields=extract_bracketed_fields(text),
        )
