"""
Integration layer for Dataview queries embedded in notes.

This module provides the bridge between note content (or raw query text)
and the Dataview parsing and execution engine.
"""

import time
from pathlib import Path
from typing import Any

from loguru import logger

from vault_query.dataview.detector import DataviewBlock, DataviewDetector
from vault_query.dataview.errors import DataviewSyntaxError
from vault_query.dataview.executor.executor import DataviewExecutor
from vault_query.dataview.executor.expression_eval import ExpressionEvaluator
from vault_query.dataview.executor.result_formatter import ResultFormatter
from vault_query.dataview.index.service import IndexService
from vault_query.dataview.parser import DataviewParser
from vault_query.dataview.results import ErrorResult, ParagraphResult
from vault_query.dataview.types import to_string


class DataviewIntegration:
    """
    Run Dataview queries against a vault index.

    This class handles:
    - Detection of Dataview queries in markdown content
    - Parsing and execution of queries
    - Error handling and result formatting
    - Performance tracking
    """

    def __init__(self, index_service: IndexService):
        """
        Initialize the Dataview integration.

        Args:
            index_service: Service providing the current index snapshot
        """
        self.index_service = index_service
        self.detector = DataviewDetector()

    def resolve_note_path(self, note_path: str | Path | None) -> Path | None:
        """Absolute path for a note given either absolute or vault-relative."""
        if note_path is None:
            return None
        path = Path(note_path).expanduser()
        if not path.is_absolute():
            path = self.index_service.vault_path / path
        return path

    def execute_query(
        self, query_text: str, current_file_path: str | Path | None = None
    ) -> tuple[list[Any], str | None]:
        """
        Parse and execute one DQL query.

        Returns:
            Tuple of (render items, error message or None). Syntax errors come
            back as a single error item prefixed with "Parse error:".
        """
        try:
            query = DataviewParser.parse(query_text)
        except DataviewSyntaxError as e:
            logger.debug(f"Dataview syntax error: {e}")
            return [ErrorResult(message=f"Parse error: {e}")], str(e)

        executor = DataviewExecutor(
            self.index_service.snapshot, self.resolve_note_path(current_file_path)
        )
        return executor.execute(query)

    def evaluate_inline(self, expression_text: str, current_file_path: str | Path | None = None) -> Any:
        """Evaluate an inline `= expr` against the page of the note containing it.

        Raises:
            DataviewSyntaxError: when the expression does not parse
        """
        expression = DataviewParser.parse_expression(expression_text)
        page = self.index_service.snapshot.current_page(self.resolve_note_path(current_file_path))
        return ExpressionEvaluator(page or {}, page).evaluate(expression)

    def process_note(self, note_content: str, note_path: str | Path | None = None) -> list[dict[str, Any]]:
        """
        Process a note and execute all Dataview queries found in it.

        Args:
            note_content: Markdown content of the note
            note_path: Path of the note, absolute or relative to the vault

        Returns:
            List of result dictionaries, one per query found
        """
        blocks = self.detector.detect_queries(note_content)
        if not blocks:
            return []

        logger.debug(f"Found {len(blocks)} Dataview queries in note")

        return [
            self._execute_block(f"dv-{idx}", block, note_path)
            for idx, block in enumerate(blocks, 1)
        ]

    def _execute_block(
        self, query_id: str, block: DataviewBlock, note_path: str | Path | None
    ) -> dict[str, Any]:
        """
        Execute a single detected query.

        Args:
            query_id: Identifier for this query within the note
            block: The detected query block
            note_path: Path of the note containing the query

        Returns:
            Dictionary with query results and metadata
        """
        start_time = time.time()
        result: dict[str, Any] = {
            "query_id": query_id,
            "query_type": "unknown",
            "query_source": self._format_query_source(block.query, block.block_type),
            "line_number": block.start_line + 1,  # Convert to 1-based
            "status": "success",
            "error": None,
            "error_type": None,
            "items": [],
        }

        if block.block_type == "inline":
            result["query_type"] = "INLINE"
            try:
                value = self.evaluate_inline(block.query, note_path)
                result["items"] = [ParagraphResult(text=to_string(value))]
            except DataviewSyntaxError as e:
                logger.warning(f"Dataview syntax error in query {query_id}: {e}")
                self._mark_error(result, f"Parse error: {e}", "syntax")
            except Exception as e:
                logger.warning(f"Dataview execution error in query {query_id}: {e}")
                self._mark_error(result, str(e), "execution")
        else:
            try:
                query = DataviewParser.parse(block.query)
            except DataviewSyntaxError as e:
                logger.warning(f"Dataview syntax error in query {query_id}: {e}")
                self._mark_error(result, f"Parse error: {e}", "syntax")
            else:
                result["query_type"] = query.query_type.value
                executor = DataviewExecutor(
                    self.index_service.snapshot, self.resolve_note_path(note_path)
                )
                items, error = executor.execute(query)
                result["items"] = items
                if error is not None:
                    result.update(status="error", error=error, error_type="execution")

        result["result_markdown"] = ResultFormatter.format_items(result["items"])
        result["execution_time_ms"] = int((time.time() - start_time) * 1000)
        return result

    @staticmethod
    def _mark_error(result: dict[str, Any], message: str, error_type: str) -> None:
        result.update(
            status="error",
            error=message,
            error_type=error_type,
            items=[ErrorResult(message=message)],
        )

    def _format_query_source(self, query_text: str, block_type: str) -> str:
        """Format query source for display."""
        if block_type == "inline":
            return f"`= {query_text}`"
        return f"```dataview\n{query_text}\n```"


def create_dataview_integration(vault_path: str | Path, **config_overrides) -> DataviewIntegration:
    """
    Factory function to create a DataviewIntegration for a vault directory.

    Args:
        vault_path: Root directory of the vault
        **config_overrides: Extra VaultQueryConfig fields (skip_dirs, ...)

    Returns:
        Configured DataviewIntegration instance
    """
    return DataviewIntegration(IndexService.for_vault(vault_path, **config_overrides))
