"""
JSONPath query evaluation.

QueryEngine is the single entry point for running a query against a decoded
JSON document. It never raises: every call returns an EvaluationResult whose
status tells the caller whether the query was malformed, the engine failed,
or the query succeeded (possibly with no matches).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .parser import InvalidQueryError, QueryParser
from .segments import PathExpression

logger = logging.getLogger(__name__)


class EvaluationStatus(Enum):
    """Classification of a query evaluation."""

    SUCCESS = "success"
    INVALID_QUERY = "invalid_query"
    ENGINE_ERROR = "engine_error"


@dataclass(frozen=True)
class EvaluationResult:
    """
    Outcome of QueryEngine.evaluate.

    matches is only meaningful for SUCCESS and may be empty. error carries
    the parse message for INVALID_QUERY and a diagnostic for ENGINE_ERROR.
    """

    status: EvaluationStatus
    matches: List[Any] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def success(cls, matches: List[Any]) -> "EvaluationResult":
        return cls(EvaluationStatus.SUCCESS, matches)

    @classmethod
    def invalid_query(cls, message: str) -> "EvaluationResult":
        return cls(EvaluationStatus.INVALID_QUERY, error=message)

    @classmethod
    def engine_error(cls, diagnostic: str) -> "EvaluationResult":
        return cls(EvaluationStatus.ENGINE_ERROR, error=diagnostic)

    @property
    def is_success(self) -> bool:
        return self.status is EvaluationStatus.SUCCESS


class QueryEngine:
    """Compiles and evaluates JSONPath queries."""

    @staticmethod
    def compile(query: str) -> PathExpression:
        """
        Compile a query string.

        Args:
            query: JSONPath query (e.g., "$.items[?(@.price > 10)].name")

        Returns:
            Compiled PathExpression

        Raises:
            InvalidQueryError: If the query is not a well-formed string
        """
        if not isinstance(query, str):
            raise InvalidQueryError(f"Query must be a string, got {type(query).__name__}", "", 0)
        return QueryParser(query).parse()

    def evaluate(self, query: str, document: Any) -> EvaluationResult:
        """
        Evaluate a JSONPath query against a document.

        Args:
            query: JSONPath query string
            document: Decoded JSON value; it is only read

        Returns:
            EvaluationResult with SUCCESS and the matches in discovery order,
            INVALID_QUERY for malformed queries, or ENGINE_ERROR if evaluation
            failed unexpectedly
        """
        try:
            expression = self.compile(query)
            matches = expression.find(document)
        except InvalidQueryError as e:
            logger.debug(f"Invalid query: {e}")
            return EvaluationResult.invalid_query(str(e))
        except Exception as e:
            logger.exception(f"Evaluating query {query!r} failed")
            return EvaluationResult.engine_error(f"{type(e).__name__}: {e}")

        logger.debug(f"Query {expression.source!r} matched {len(matches)} value(s)")
        return EvaluationResult.success(matches)


_default_engine = QueryEngine()


def evaluate(query: str, document: Any) -> EvaluationResult:
    """Evaluate a query with a shared QueryEngine; see QueryEngine.evaluate."""
    return _default_engine.evaluate(query, document)
