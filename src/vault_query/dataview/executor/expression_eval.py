"""
Expression evaluator for Dataview queries.

Evaluates AST expressions against page data. Soft anomalies (missing
fields, unknown functions, division by zero) evaluate to None instead of
raising.
"""

from typing import Any

from vault_query.dataview.ast import (
    BinaryOpNode,
    ExpressionNode,
    FieldNode,
    FunctionCallNode,
    LiteralNode,
    NegateNode,
    ThisNode,
    UnaryOpNode,
)
from vault_query.dataview.errors import DataviewExecutionError
from vault_query.dataview.executor.field_resolver import FieldResolver
from vault_query.dataview.executor.functions import call_function, contains_value
from vault_query.dataview.types import (
    Date,
    Duration,
    compare,
    equals,
    to_number,
    to_string,
    truthy,
    typename,
)


class ExpressionEvaluator:
    """Evaluates expressions in the context of a page.

    ``current_page`` is the page containing the query; `this` resolves
    against it rather than against the row being evaluated.
    """

    def __init__(self, page: dict[str, Any], current_page: dict[str, Any] | None = None):
        self.page = page
        self.current_page = current_page

    def evaluate(self, expression: ExpressionNode) -> Any:
        """
        Evaluate an expression node.

        Args:
            expression: AST expression node

        Returns:
            Evaluated value
        """
        if isinstance(expression, LiteralNode):
            return expression.value

        elif isinstance(expression, FieldNode):
            if expression.base is not None:
                start = self.evaluate(expression.base)
            elif expression.this:
                start = self.current_page
            else:
                start = self.page
            return FieldResolver.resolve_path(start, expression.path)

        elif isinstance(expression, ThisNode):
            return self.current_page

        elif isinstance(expression, BinaryOpNode):
            return self._eval_binary_op(expression)

        elif isinstance(expression, UnaryOpNode):
            return not truthy(self.evaluate(expression.operand))

        elif isinstance(expression, NegateNode):
            value = self.evaluate(expression.operand)
            if isinstance(value, Duration):
                return value.negated()
            return -(to_number(value) or 0)

        elif isinstance(expression, FunctionCallNode):
            args = [self.evaluate(arg) for arg in expression.arguments]
            return call_function(expression.function_name, args)

        else:
            raise DataviewExecutionError(f"Unknown expression type: {type(expression).__name__}")

    def _eval_binary_op(self, expression: BinaryOpNode) -> Any:
        """Evaluate binary operations. AND/OR short-circuit and always give a boolean."""
        operator = expression.operator

        if operator == "AND":
            if not truthy(self.evaluate(expression.left)):
                return False
            return truthy(self.evaluate(expression.right))
        if operator == "OR":
            if truthy(self.evaluate(expression.left)):
                return True
            return truthy(self.evaluate(expression.right))

        left = self.evaluate(expression.left)
        right = self.evaluate(expression.right)

        if operator == "=":
            return equals(left, right)
        elif operator == "!=":
            return not equals(left, right)
        elif operator in ("<", ">", "<=", ">="):
            return ordered(operator, left, right)
        elif operator == "CONTAINS":
            return contains_value(left, right)
        elif operator == "+":
            return add_values(left, right)
        elif operator == "-":
            return subtract_values(left, right)
        elif operator == "*":
            return (to_number(left) or 0) * (to_number(right) or 0)
        elif operator in ("/", "%"):
            divisor = to_number(right) or 0
            if divisor == 0:
                return None
            dividend = to_number(left) or 0
            return dividend / divisor if operator == "/" else dividend % divisor
        else:
            raise DataviewExecutionError(f"Unknown operator: {operator}")


def ordered(operator: str, left: Any, right: Any) -> bool:
    """Ordering comparison. Null orders before everything; other mixed types never match."""
    if left is not None and right is not None and typename(left) != typename(right):
        return False
    result = compare(left, right)
    if operator == "<":
        return result < 0
    if operator == ">":
        return result > 0
    if operator == "<=":
        return result <= 0
    return result >= 0


def add_values(left: Any, right: Any) -> Any:
    """String concatenation, date/duration arithmetic, else numeric addition."""
    if isinstance(left, str) or isinstance(right, str):
        return to_string(left) + to_string(right)
    if isinstance(left, Date) and isinstance(right, Duration):
        return left.plus(right)
    if isinstance(left, Duration) and isinstance(right, Date):
        return right.plus(left)
    if isinstance(left, Duration) and isinstance(right, Duration):
        return left + right
    return (to_number(left) or 0) + (to_number(right) or 0)


def subtract_values(left: Any, right: Any) -> Any:
    if isinstance(left, Date):
        return left.minus(right)
    return (to_number(left) or 0) - (to_number(right) or 0)
