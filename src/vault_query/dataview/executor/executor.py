"""
Main executor for Dataview queries.

Executes parsed queries against an index snapshot. The pipeline runs in a
fixed order:

    1. source resolution (FROM, or every page)
    2. FLATTEN
    3. WHERE (per task for TASK queries, see step 7)
    4. SORT (stable, multi-key)
    5. GROUP BY
    6. LIMIT (only when there is no GROUP BY)
    7. render item construction
"""

from functools import cmp_to_key
from pathlib import Path
from typing import Any

from loguru import logger

from vault_query.dataview.ast import (
    DataviewQuery,
    ExpressionNode,
    FieldNode,
    FunctionCallNode,
    LiteralNode,
    QueryType,
    SortDirection,
)
from vault_query.dataview.executor.expression_eval import ExpressionEvaluator
from vault_query.dataview.executor.field_resolver import FieldResolver
from vault_query.dataview.index.index import Page, Snapshot
from vault_query.dataview.results import (
    ErrorResult,
    ListResult,
    TableResult,
    TaskGroup,
    TaskItem,
    TaskListResult,
)
from vault_query.dataview.types import compare, to_string, truthy

Group = tuple[Any, list[Page]]


def expression_name(expression: ExpressionNode) -> str:
    """Column name for an expression without an alias."""
    if isinstance(expression, FieldNode):
        return expression.field_name
    if isinstance(expression, FunctionCallNode):
        return f"{expression.function_name}(...)"
    if isinstance(expression, LiteralNode):
        return to_string(expression.value) if expression.value is not None else "null"
    return "value"


class DataviewExecutor:
    """Executes Dataview queries against an index snapshot."""

    def __init__(self, snapshot: Snapshot, current_file_path: str | Path | None = None):
        """
        Initialize executor.

        Args:
            snapshot: Index snapshot to query
            current_file_path: Absolute path of the note containing the query,
                used to resolve `this`
        """
        self.snapshot = snapshot
        self.current_file_path = current_file_path
        self.current_page = snapshot.current_page(current_file_path)

    def execute(self, query: DataviewQuery) -> tuple[list[Any], str | None]:
        """
        Execute a query.

        Args:
            query: Parsed Dataview query

        Returns:
            Tuple of (render items, error message). On failure the items are a
            single ErrorResult and the message is set; nothing is raised.
        """
        try:
            return self._run(query), None
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning(f"Query execution failed: {message}")
            return [ErrorResult(message=message)], message

    def _run(self, query: DataviewQuery) -> list[Any]:
        pages = self._resolve_source(query)
        pages = self._apply_flatten(pages, query)
        if query.query_type != QueryType.TASK:
            pages = self._apply_where(pages, query)
        pages = self._apply_sort(pages, query)

        groups = self._apply_group_by(pages, query)
        if groups is None and query.limit is not None:
            pages = pages[: max(query.limit, 0)]

        logger.debug(
            f"{query.query_type.value} query matched {len(pages)} pages"
            + (f" in {len(groups)} groups" if groups is not None else "")
        )

        if query.query_type == QueryType.TABLE:
            return self._build_table(query, pages, groups)
        if query.query_type == QueryType.LIST:
            return self._build_list(query, pages, groups)
        return self._build_tasks(query, pages, groups)

    def _evaluate(self, expression: ExpressionNode, page: Page) -> Any:
        return ExpressionEvaluator(page, self.current_page).evaluate(expression)

    # Pipeline stages

    def _resolve_source(self, query: DataviewQuery) -> list[Page]:
        if query.from_source is None:
            return self.snapshot.all_pages()
        return self.snapshot.resolve_source(query.from_source)

    def _apply_flatten(self, pages: list[Page], query: DataviewQuery) -> list[Page]:
        """One shallow copy per element of a non-empty list value; other pages pass through."""
        if query.flatten is None:
            return pages

        expression = query.flatten.expression
        if query.flatten.alias:
            target = [query.flatten.alias]
        elif isinstance(expression, FieldNode) and not expression.this and expression.base is None:
            target = list(expression.path)
        else:
            target = [expression_name(expression)]

        flattened = []
        for page in pages:
            value = self._evaluate(expression, page)
            if isinstance(value, list) and value:
                flattened.extend(FieldResolver.with_path(page, target, item) for item in value)
            else:
                flattened.append(page)
        return flattened

    def _apply_where(self, pages: list[Page], query: DataviewQuery) -> list[Page]:
        if query.where_clause is None:
            return pages
        return [page for page in pages if truthy(self._evaluate(query.where_clause, page))]

    def _apply_sort(self, pages: list[Page], query: DataviewQuery) -> list[Page]:
        """Stable sort; ties on one key fall through to the next."""
        if not query.sort_clauses:
            return pages

        clauses = query.sort_clauses
        keyed = [
            ([self._evaluate(clause.expression, page) for clause in clauses], page)
            for page in pages
        ]

        def compare_rows(a, b) -> int:
            for index, clause in enumerate(clauses):
                result = compare(a[0][index], b[0][index])
                if result:
                    return -result if clause.direction == SortDirection.DESC else result
            return 0

        keyed.sort(key=cmp_to_key(compare_rows))
        return [page for _, page in keyed]

    def _apply_group_by(self, pages: list[Page], query: DataviewQuery) -> list[Group] | None:
        """Groups in order of first appearance, keyed by the string form of the value."""
        if query.group_by is None:
            return None

        groups: dict[Any, Group] = {}
        for page in pages:
            value = self._evaluate(query.group_by.expression, page)
            key = None if value is None else to_string(value)
            if key not in groups:
                groups[key] = (value, [])
            groups[key][1].append(page)
        return list(groups.values())

    # Result construction

    def _build_table(
        self, query: DataviewQuery, pages: list[Page], groups: list[Group] | None
    ) -> list[TableResult]:
        fields = query.fields or []
        headers = [] if query.without_id else ["File"]
        headers.extend(field.alias or expression_name(field.expression) for field in fields)

        def row(page: Page) -> list[Any]:
            cells = [] if query.without_id else [page["file"]["link"]]
            cells.extend(self._evaluate(field.expression, page) for field in fields)
            return cells

        if groups is None:
            return [TableResult(headers=headers, rows=[row(page) for page in pages])]

        return [
            TableResult(headers=headers, rows=[row(page) for page in members], group=to_string(key))
            for key, members in groups
        ]

    def _build_list(
        self, query: DataviewQuery, pages: list[Page], groups: list[Group] | None
    ) -> list[ListResult]:
        def item(page: Page) -> Any:
            link = page["file"]["link"]
            if query.list_expression is None:
                return link
            value = self._evaluate(query.list_expression, page)
            if query.without_id:
                return value
            if value is None:
                return link
            return f"{link}: {to_string(value)}"

        if groups is None:
            return [ListResult(items=[item(page) for page in pages])]

        return [
            ListResult(items=[item(page) for page in members], group=to_string(key))
            for key, members in groups
        ]

    def _build_tasks(
        self, query: DataviewQuery, pages: list[Page], groups: list[Group] | None
    ) -> list[TaskListResult]:
        """Tasks grouped by the GROUP BY key, or by the page they live on.

        WHERE is evaluated per task against the page overlaid with the task's
        fields. Groups left without tasks are dropped.
        """

        def matching_tasks(page: Page) -> list[TaskItem]:
            items = []
            for task in page["file"]["tasks"]:
                if query.where_clause is not None:
                    context = FieldResolver.task_context(page, task)
                    if not truthy(self._evaluate(query.where_clause, context)):
                        continue
                items.append(
                    TaskItem(
                        text=task.get("text") or "",
                        status=task.get("status") or " ",
                        completed=bool(task.get("completed")),
                    )
                )
            return items

        if groups is None:
            groups = [(page["file"]["link"], [page]) for page in pages]

        result_groups: dict[str, TaskGroup] = {}
        for key, members in groups:
            tasks = [task for page in members for task in matching_tasks(page)]
            if not tasks:
                continue
            name = to_string(key)
            if name in result_groups:
                result_groups[name].tasks.extend(tasks)
            else:
                result_groups[name] = TaskGroup(name=name, tasks=tasks)

        return [TaskListResult(groups=list(result_groups.values()))]
