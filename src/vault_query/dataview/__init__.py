"""
Dataview query engine.

This package provides indexing of a note vault and parsing and execution of
Dataview (DQL) queries against it.
"""

from vault_query.dataview.ast import (
    DataviewQuery,
    FlattenClause,
    GroupByClause,
    QueryType,
    SortClause,
    SortDirection,
    TableField,
)
from vault_query.dataview.detector import DataviewBlock, DataviewDetector
from vault_query.dataview.errors import (
    DataviewError,
    DataviewExecutionError,
    DataviewParseError,
    DataviewSyntaxError,
)
from vault_query.dataview.executor import DataviewExecutor, ResultFormatter
from vault_query.dataview.index import IndexService, Snapshot, build_index
from vault_query.dataview.integration import (
    DataviewIntegration,
    create_dataview_integration,
)
from vault_query.dataview.lexer import DataviewLexer, Token, TokenType
from vault_query.dataview.parser import DataviewParser
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
from vault_query.dataview.types import Date, Duration, Link, compare, equals, truthy

__all__ = [
    # AST
    "DataviewQuery",
    "FlattenClause",
    "GroupByClause",
    "QueryType",
    "SortClause",
    "SortDirection",
    "TableField",
    # Detector
    "DataviewBlock",
    "DataviewDetector",
    # Errors
    "DataviewError",
    "DataviewExecutionError",
    "DataviewParseError",
    "DataviewSyntaxError",
    # Executor
    "DataviewExecutor",
    "ResultFormatter",
    # Index
    "IndexService",
    "Snapshot",
    "build_index",
    # Integration
    "DataviewIntegration",
    "create_dataview_integration",
    # Lexer
    "DataviewLexer",
    "Token",
    "TokenType",
    # Parser
    "DataviewParser",
    # Render items
    "ErrorResult",
    "HeaderResult",
    "ListResult",
    "ParagraphResult",
    "RenderItem",
    "TableResult",
    "TaskGroup",
    "TaskItem",
    "TaskListResult",
    # Types
    "Date",
    "Duration",
    "Link",
    "compare",
    "equals",
    "truthy",
]
