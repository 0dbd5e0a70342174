#!/usr/bin/env python3
"""
server.py - JSONPath query server

FastAPI-based server that evaluates JSONPath queries against JSON document
text and returns the matches formatted as JSON or plain text. Saved queries
are read from configs/saved_queries.json.
"""

import logging
from typing import List, Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from jsonpath_extract import __version__
from jsonpath_extract.config import ConfigLoader
from jsonpath_extract.exceptions import (
    InvalidJsonPathError,
    NoJsonDocumentError,
    NoSavedQueriesError,
    QueryEngineFailure,
    QueryRunError,
    SavedQueryNotFoundError,
)
from jsonpath_extract.query import QueryEngine
from jsonpath_extract.rendering import QueryOutput, QueryRunner, ResultFormatter

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title="JSONPath Extract API", version=__version__)

# Initialize components
query_runner = QueryRunner(QueryEngine(), ResultFormatter(), ConfigLoader())


class QueryRequest(BaseModel):
    """Request to run a query against a document."""
    document_text: str = Field(..., description="Raw JSON text of the document")
    query: str = Field(..., description="JSONPath query, e.g. $.items[?(@.price > 10)]")
    output: Literal["json", "text"] = "json"


class SavedQueryRequest(BaseModel):
    """Request to run a saved query against a document."""
    document_text: str
    title: str


class QueryResponse(BaseModel):
    """Formatted query result."""
    content: str
    language: str
    match_count: int
    message: Optional[str] = None


class SavedQueryInfo(BaseModel):
    title: str
    query: str
    output: str


# HTTP status per user-facing error
ERROR_STATUS = {
    NoJsonDocumentError: 400,
    InvalidJsonPathError: 400,
    NoSavedQueriesError: 404,
    SavedQueryNotFoundError: 404,
    QueryEngineFailure: 500,
}


def to_response(output: QueryOutput) -> QueryResponse:
    return QueryResponse(
        content=output.content,
        language=output.language,
        match_count=output.match_count,
        message=output.message
    )


def to_http_error(error: QueryRunError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), 500)
    logger.info(f"Query request failed with {status_code}: {error}")
    return HTTPException(status_code=status_code, detail=str(error))


@app.post("/query", response_model=QueryResponse)
async def run_query(request: QueryRequest):
    """
    Run a JSONPath query against document text.

    Args:
        request: Document text, query and output format ("json" or "text")

    Returns:
        Formatted matches with the output language tag ("json" or "plaintext")
    """
    try:
        output = query_runner.run(request.document_text, request.query, request.output == "json")
    except QueryRunError as e:
        raise to_http_error(e)
    return to_response(output)


@app.get("/saved-queries", response_model=List[SavedQueryInfo])
async def list_saved_queries():
    """List configured saved queries."""
    try:
        saved_queries = query_runner.config_loader.load_saved_queries()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Error loading saved queries: {str(e)}")
    return [
        SavedQueryInfo(title=sq.title, query=sq.query, output=sq.output.value)
        for sq in saved_queries
    ]


@app.post("/saved-queries/run", response_model=QueryResponse)
async def run_saved_query(request: SavedQueryRequest):
    """
    Run a saved query, selected by title, against document text.

    The saved query's output format decides between JSON and plain text.
    """
    try:
        output = query_runner.run_saved_query(request.document_text, request.title)
    except QueryRunError as e:
        raise to_http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Error loading saved queries: {str(e)}")
    return to_response(output)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
