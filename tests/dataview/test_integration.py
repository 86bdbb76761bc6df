"""Tests for DataviewIntegration: queries embedded in notes."""

import pytest

from vault_query.dataview.errors import DataviewSyntaxError
from vault_query.dataview.integration import DataviewIntegration, create_dataview_integration
from vault_query.dataview.results import ErrorResult, ListResult, ParagraphResult, TableResult
from vault_query.dataview.types import Link


@pytest.fixture
def integration(index_service) -> DataviewIntegration:
    return DataviewIntegration(index_service)


class TestExecuteQuery:
    """Test running raw query text."""

    def test_execute_list(self, integration):
        items, error = integration.execute_query("LIST FROM #project SORT file.name")
        assert error is None
        assert isinstance(items[0], ListResult)
        assert items[0].items == [Link("A"), Link("B")]

    def test_syntax_error(self, integration):
        items, error = integration.execute_query("LIST WHERE")
        assert error
        assert len(items) == 1
        assert isinstance(items[0], ErrorResult)
        assert items[0].message.startswith("Parse error:")

    def test_relative_current_file(self, integration):
        items, _ = integration.execute_query(
            "TABLE WITHOUT ID file.name WHERE priority > this.priority SORT file.name", "B.md"
        )
        assert items[0].rows == [["A"], ["Plan"]]

    def test_absolute_current_file(self, integration, vault):
        items, _ = integration.execute_query("LIST WHERE file.name = this.file.name", vault / "C.md")
        assert items[0].items == [Link("C")]


class TestEvaluateInline:
    """Test inline expression evaluation."""

    def test_reads_current_page(self, integration):
        assert integration.evaluate_inline("this.status", "A.md") == "Active"
        assert integration.evaluate_inline("status", "A.md") == "Active"
        assert integration.evaluate_inline("length(file.tasks)", "A.md") == 2

    def test_without_page(self, integration):
        assert integration.evaluate_inline("1 + 2") == 3
        assert integration.evaluate_inline("this.status") is None

    def test_syntax_error_raises(self, integration):
        with pytest.raises(DataviewSyntaxError):
            integration.evaluate_inline("1 +")


class TestProcessNote:
    """Test executing every query found in a note."""

    def test_note_without_queries(self, integration):
        assert integration.process_note("# Nothing here") == []

    def test_codeblock_result(self, integration):
        content = "# Dashboard\n\n```dataview\nTABLE status FROM #project SORT file.name\n```\n"
        results = integration.process_note(content, "Dashboard.md")
        assert len(results) == 1
        result = results[0]
        assert result["query_id"] == "dv-1"
        assert result["query_type"] == "TABLE"
        assert result["line_number"] == 3
        assert result["status"] == "success"
        assert result["error"] is None
        assert result["error_type"] is None
        assert result["query_source"] == "```dataview\nTABLE status FROM #project SORT file.name\n```"
        assert isinstance(result["items"][0], TableResult)
        assert "| File | status |" in result["result_markdown"]
        assert result["execution_time_ms"] >= 0

    def test_inline_result(self, integration):
        results = integration.process_note("Status: `= this.status`", "A.md")
        result = results[0]
        assert result["query_type"] == "INLINE"
        assert result["query_source"] == "`= this.status`"
        assert result["items"] == [ParagraphResult(text="Active")]
        assert result["result_markdown"] == "Active"

    def test_ids_follow_detection_order(self, integration):
        content = "`= 1`\n```dataview\nLIST\n```\n```dataview\nTASK\n```"
        results = integration.process_note(content)
        assert [(r["query_id"], r["query_type"]) for r in results] == [
            ("dv-1", "LIST"),
            ("dv-2", "TASK"),
            ("dv-3", "INLINE"),
        ]

    def test_syntax_error_in_codeblock(self, integration):
        results = integration.process_note("```dataview\nLIST FROM\n```")
        result = results[0]
        assert result["status"] == "error"
        assert result["error_type"] == "syntax"
        assert result["query_type"] == "unknown"
        assert result["error"].startswith("Parse error:")
        assert isinstance(result["items"][0], ErrorResult)
        assert result["result_markdown"].startswith("> [!error] Parse error:")

    def test_execution_error_in_codeblock(self, integration):
        results = integration.process_note('```dataview\nLIST WHERE regexmatch(file.name, "(")\n```')
        result = results[0]
        assert result["status"] == "error"
        assert result["error_type"] == "execution"
        assert result["query_type"] == "LIST"

    def test_errors_in_inline_queries(self, integration):
        results = integration.process_note('`= 1 +`\n`= regexmatch("x", "(")`')
        assert [r["error_type"] for r in results] == ["syntax", "execution"]
        assert all(isinstance(r["items"][0], ErrorResult) for r in results)

    def test_one_failure_does_not_stop_others(self, integration):
        content = "```dataview\nLIST WHERE\n```\n```dataview\nLIST FROM #idea\n```"
        results = integration.process_note(content)
        assert [r["status"] for r in results] == ["error", "success"]
        assert results[1]["items"][0].items == [Link("Projects/Plan")]


class TestFactory:
    """Test create_dataview_integration."""

    def test_create_for_vault(self, vault):
        integration = create_dataview_integration(vault, ignore_patterns=["B.md"])
        assert integration.index_service.vault_path == vault
        items, _ = integration.execute_query("LIST FROM #project")
        assert items[0].items == [Link("A")]
