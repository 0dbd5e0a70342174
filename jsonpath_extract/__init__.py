"""Evaluate JSONPath queries against JSON documents and format the matches."""

from .query import EvaluationResult, EvaluationStatus, QueryEngine, evaluate
from .rendering import QueryOutput, QueryRunner, ResultFormatter, format_matches

__version__ = "1.0.0"

__all__ = [
    "EvaluationResult",
    "EvaluationStatus",
    "QueryEngine",
    "evaluate",
    "QueryOutput",
    "QueryRunner",
    "ResultFormatter",
    "format_matches",
]
