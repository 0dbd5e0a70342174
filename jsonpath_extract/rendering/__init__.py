"""Result formatting and query running modules."""

from .formatter import ResultFormatter, format_matches
from .query_runner import QueryOutput, QueryRunner

__all__ = ["ResultFormatter", "format_matches", "QueryOutput", "QueryRunner"]
