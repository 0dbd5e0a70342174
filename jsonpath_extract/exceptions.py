"""
User-facing errors raised while running queries.

Each error carries the message shown to the user; the HTTP server and the
command line map them to status codes and exit codes.
"""


class QueryRunError(Exception):
    """Base class for errors reported to the user when running a query."""

    message = "Query failed."

    def __init__(self, detail: str = ""):
        super().__init__(self.message if not detail else f"{self.message} {detail}")
        self.detail = detail


class NoJsonDocumentError(QueryRunError):
    message = "Active editor doesn't show a valid JSON file - please open a valid JSON file first"


class InvalidJsonPathError(QueryRunError):
    message = "Provided jsonpath expression is not valid."


class NoSavedQueriesError(QueryRunError):
    message = "Couldn't find any JSONPath queries in configuration."


class SavedQueryNotFoundError(QueryRunError):
    message = "Saved query not found."


class QueryEngineFailure(QueryRunError):
    message = "Query evaluation failed unexpectedly."
