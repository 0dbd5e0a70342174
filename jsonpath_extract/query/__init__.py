"""JSONPath parsing and evaluation."""

from .engine import EvaluationResult, EvaluationStatus, QueryEngine, evaluate
from .parser import InvalidQueryError, QueryParser
from .segments import PathExpression
from .values import JsonKind, kind_of

__all__ = [
    "EvaluationResult",
    "EvaluationStatus",
    "QueryEngine",
    "evaluate",
    "InvalidQueryError",
    "QueryParser",
    "PathExpression",
    "JsonKind",
    "kind_of",
]
