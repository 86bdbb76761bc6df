"""
Dataview Query Executor.

Executes parsed Dataview queries against an index snapshot.
"""

from vault_query.dataview.executor.executor import DataviewExecutor
from vault_query.dataview.executor.expression_eval import ExpressionEvaluator
from vault_query.dataview.executor.field_resolver import FieldResolver
from vault_query.dataview.executor.functions import FUNCTIONS, call_function
from vault_query.dataview.executor.result_formatter import ResultFormatter

__all__ = [
    "DataviewExecutor",
    "ExpressionEvaluator",
    "FUNCTIONS",
    "FieldResolver",
    "ResultFormatter",
    "call_function",
]
