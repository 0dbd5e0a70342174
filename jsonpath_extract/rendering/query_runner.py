"""
Running queries against document text.

Ties the query engine and result formatter together: parses the document,
evaluates the query, turns the evaluation status into user-facing errors and
picks the language of the rendered output.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..config import ConfigLoader, SavedQuery
from ..exceptions import (
    InvalidJsonPathError,
    NoJsonDocumentError,
    NoSavedQueriesError,
    QueryEngineFailure,
    SavedQueryNotFoundError,
)
from ..query import EvaluationStatus, QueryEngine
from .formatter import ResultFormatter

logger = logging.getLogger(__name__)

NO_RESULTS_FOUND_MSG = "No results found for provided jsonpath."


@dataclass(frozen=True)
class QueryOutput:
    """Rendered result of a successful query."""

    content: str
    language: str
    match_count: int
    message: Optional[str] = None

    @property
    def has_results(self) -> bool:
        return self.match_count > 0


class QueryRunner:
    """Runs typed-in or saved queries against JSON document text."""

    def __init__(
        self,
        engine: QueryEngine,
        formatter: ResultFormatter,
        config_loader: Optional[ConfigLoader] = None
    ):
        self.engine = engine
        self.formatter = formatter
        self.config_loader = config_loader or ConfigLoader()

    @staticmethod
    def parse_document(text: str) -> Any:
        """
        Decode document text, requiring a JSON object or array at the top level.

        Raises:
            NoJsonDocumentError: If the text is not JSON or holds a bare scalar
        """
        try:
            document = json.loads(text)
        except (TypeError, ValueError, RecursionError) as e:
            logger.debug(f"Document is not valid JSON: {e}")
            raise NoJsonDocumentError() from None

        if not isinstance(document, (dict, list)):
            raise NoJsonDocumentError()
        return document

    def run(self, document_text: str, query: str, as_json: bool) -> QueryOutput:
        """
        Run a query against document text.

        Args:
            document_text: Raw JSON text of the document
            query: JSONPath query
            as_json: Render as a JSON array (True) or plain text lines (False)

        Returns:
            QueryOutput; when nothing matched, match_count is 0 and message
            says so

        Raises:
            NoJsonDocumentError: Document text is not a JSON object or array
            InvalidJsonPathError: Query is malformed
            QueryEngineFailure: Evaluation failed unexpectedly
        """
        document = self.parse_document(document_text)
        result = self.engine.evaluate(query, document)

        if result.status is EvaluationStatus.INVALID_QUERY:
            raise InvalidJsonPathError(result.error or "")
        if result.status is EvaluationStatus.ENGINE_ERROR:
            logger.error(f"Query engine failed for {query!r}: {result.error}")
            raise QueryEngineFailure()

        content = self.formatter.format(result.matches, as_json)
        language = "json" if as_json else "plaintext"
        if not result.matches:
            return QueryOutput(content, language, 0, NO_RESULTS_FOUND_MSG)
        return QueryOutput(content, language, len(result.matches))

    def run_saved_query(self, document_text: str, title: str) -> QueryOutput:
        """
        Run a saved query by title, using its configured output format.

        Raises:
            NoSavedQueriesError: No saved queries are configured
            SavedQueryNotFoundError: No saved query has this title
        """
        saved_query = self.select_saved_query(title)
        logger.info(f"Running saved query '{saved_query.title}': {saved_query.query}")
        return self.run(document_text, saved_query.query, saved_query.as_json)

    def select_saved_query(self, title: str) -> SavedQuery:
        saved_queries = self.config_loader.load_saved_queries()
        if not saved_queries:
            raise NoSavedQueriesError()

        for saved_query in saved_queries:
            if saved_query.title == title:
                return saved_query
        raise SavedQueryNotFoundError(f"No saved query titled '{title}'.")
