"""Tests for TaskExtractor."""

from vault_query.dataview.index.task_extractor import ListItem, Task, TaskExtractor
from vault_query.dataview.types import Date


class TestTaskExtractorBasic:
    """Test basic task extraction."""

    def test_extract_single_task(self):
        """Test extracting single task."""
        tasks = TaskExtractor.extract_tasks("- [ ] Task 1")
        assert len(tasks) == 1
        assert tasks[0].text == "Task 1"
        assert tasks[0].status == " "
        assert tasks[0].completed is False

    def test_extract_completed_task(self):
        """Both x and X mark a task completed."""
        for marker in ("x", "X"):
            tasks = TaskExtractor.extract_tasks(f"- [{marker}] Done task")
            assert tasks[0].completed is True

    def test_custom_status_is_not_completed(self):
        tasks = TaskExtractor.extract_tasks("- [/] In progress")
        assert tasks[0].status == "/"
        assert tasks[0].completed is False

    def test_star_bullets_and_indentation(self):
        content = "* [ ] Star task\n    - [ ] Nested task"
        tasks = TaskExtractor.extract_tasks(content)
        assert [t.text for t in tasks] == ["Star task", "Nested task"]

    def test_not_a_task(self):
        """Missing space after the checkbox or bullet means no task."""
        assert TaskExtractor.extract_tasks("- [ ]no space\n-[ ] no bullet space") == []


class TestTaskExtractorLines:
    """Test line numbering and fenced code."""

    def test_line_numbers_are_one_based(self):
        tasks = TaskExtractor.extract_tasks("# Title\n\n- [ ] Task")
        assert tasks[0].line_number == 3

    def test_first_line_offset(self):
        tasks, _ = TaskExtractor.extract("- [ ] Task", first_line=10)
        assert tasks[0].line_number == 10

    def test_tasks_in_code_blocks_are_ignored(self):
        content = "```\n- [ ] not a task\n```\n- [ ] real task"
        tasks = TaskExtractor.extract_tasks(content)
        assert [t.text for t in tasks] == ["real task"]
        assert tasks[0].line_number == 4


class TestTaskExtractorMetadata:
    """Test task fields and tags."""

    def test_task_fields(self):
        task = TaskExtractor.extract_tasks("- [ ] buy milk [due:: 2026-01-01]")[0]
        assert task.fields == {"due": Date(2026, 1, 1)}

    def test_task_tags_are_expanded(self):
        task = TaskExtractor.extract_tasks("- [ ] ship it #work/urgent")[0]
        assert task.tags == ["work", "work/urgent"]

    def test_to_dict(self):
        task = Task(text="t", status="x", line_number=4, tags=["a"], fields={"due": 1, "text": "shadow"})
        assert task.to_dict() == {
            "due": 1,
            "text": "t",
            "completed": True,
            "status": "x",
            "line": 4,
            "tags": ["a"],
        }


class TestListItems:
    """Test list item extraction."""

    def test_list_items_include_tasks(self):
        _, items = TaskExtractor.extract("- plain\n- [ ] task\nnot a list")
        assert items == [
            ListItem(text="plain", line_number=1, task=False),
            ListItem(text="task", line_number=2, task=True),
        ]

    def test_list_item_dict(self):
        assert ListItem(text="x", line_number=2).to_dict() == {"text": "x", "line": 2, "task": False}
