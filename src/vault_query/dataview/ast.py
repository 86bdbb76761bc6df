"""
Abstract Syntax Tree (AST) definitions for Dataview queries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class QueryType(Enum):
    """Type of Dataview query."""

    TABLE = "TABLE"
    LIST = "LIST"
    TASK = "TASK"


class SortDirection(Enum):
    """Sort direction for SORT clause."""

    ASC = "ASC"
    DESC = "DESC"


# --- Expressions ---


@dataclass
class ExpressionNode:
    """Base class for expression nodes in the AST."""

    pass


@dataclass
class LiteralNode(ExpressionNode):
    """Literal value (string, number, boolean, null)."""

    value: Any


@dataclass
class FieldNode(ExpressionNode):
    """Dotted field reference (e.g., 'status', 'file.name', 'this.file.link').

    ``this`` resolves the path against the page containing the query;
    ``base`` is set when the path hangs off an arbitrary expression.
    """

    path: list[str]
    this: bool = False
    base: ExpressionNode | None = None

    @property
    def field_name(self) -> str:
        return ".".join(self.path)


@dataclass
class ThisNode(ExpressionNode):
    """Bare `this`: the page containing the query."""

    pass


@dataclass
class BinaryOpNode(ExpressionNode):
    """Binary operation (e.g., 'status = "active"', 'priority > 1', 'a + b')."""

    operator: str  # =, !=, <, >, <=, >=, CONTAINS, +, -, *, /, %, AND, OR
    left: ExpressionNode
    right: ExpressionNode


@dataclass
class UnaryOpNode(ExpressionNode):
    """Logical negation (`!expr` or `NOT expr`)."""

    operator: str  # NOT
    operand: ExpressionNode


@dataclass
class NegateNode(ExpressionNode):
    """Arithmetic negation (`-expr`)."""

    operand: ExpressionNode


@dataclass
class FunctionCallNode(ExpressionNode):
    """Function call (e.g., 'contains(tags, "bug")')."""

    function_name: str
    arguments: list[ExpressionNode] = field(default_factory=list)


# --- Sources (FROM clause) ---


@dataclass
class SourceNode:
    """Base class for FROM clause nodes."""

    pass


@dataclass
class FolderSource(SourceNode):
    path: str


@dataclass
class TagSource(SourceNode):
    tag: str  # without the leading '#'


@dataclass
class AndSource(SourceNode):
    left: SourceNode
    right: SourceNode


@dataclass
class OrSource(SourceNode):
    left: SourceNode
    right: SourceNode


@dataclass
class NotSource(SourceNode):
    operand: SourceNode


# --- Clauses ---


@dataclass
class TableField:
    """Field specification in TABLE query."""

    expression: ExpressionNode
    alias: str | None = None


@dataclass
class SortClause:
    """One SORT key."""

    expression: ExpressionNode
    direction: SortDirection = SortDirection.ASC


@dataclass
class GroupByClause:
    expression: ExpressionNode
    alias: str | None = None


@dataclass
class FlattenClause:
    expression: ExpressionNode
    alias: str | None = None


@dataclass
class DataviewQuery:
    """Complete Dataview query AST."""

    query_type: QueryType
    without_id: bool = False
    fields: list[TableField] | None = None  # For TABLE queries
    list_expression: ExpressionNode | None = None  # For LIST queries
    from_source: SourceNode | None = None  # FROM clause
    where_clause: ExpressionNode | None = None  # WHERE clause
    sort_clauses: list[SortClause] | None = None  # SORT clause
    group_by: GroupByClause | None = None  # GROUP BY clause
    flatten: FlattenClause | None = None  # FLATTEN clause
    limit: int | None = None  # LIMIT clause

    def __repr__(self) -> str:
        parts = [f"DataviewQuery(type={self.query_type.value}"]
        if self.without_id:
            parts.append("without_id")
        if self.fields:
            parts.append(f"fields={len(self.fields)}")
        if self.from_source:
            parts.append(f"from={self.from_source!r}")
        if self.where_clause:
            parts.append("where=...")
        if self.sort_clauses:
            parts.append(f"sort={len(self.sort_clauses)}")
        if self.group_by:
            parts.append("group_by=...")
        if self.flatten:
            parts.append("flatten=...")
        if self.limit is not None:
            parts.append(f"limit={self.limit}")
        return ", ".join(parts) + ")"
