"""
Configuration and document loaders.

Handles loading of saved queries and of JSON document text from disk.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class OutputFormat(Enum):
    """How query results are rendered."""

    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True)
class SavedQuery:
    """A named query with its preferred output format."""

    title: str
    query: str
    output: OutputFormat = OutputFormat.JSON

    @property
    def as_json(self) -> bool:
        return self.output is OutputFormat.JSON

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> "SavedQuery":
        """
        Build a saved query from a configuration record.

        Accepts {"title", "query", "output"}; "outputFormat" is accepted as
        an alias for "output", which defaults to "json".

        Raises:
            ValueError: If the record is missing fields or names an unknown format
        """
        if not isinstance(entry, dict):
            raise ValueError(f"Saved query must be an object, got {type(entry).__name__}")

        title = entry.get("title")
        query = entry.get("query")
        if not isinstance(title, str) or not title:
            raise ValueError(f"Saved query {entry!r} missing required 'title' field")
        if not isinstance(query, str) or not query:
            raise ValueError(f"Saved query '{title}' missing required 'query' field")

        output = entry.get("output", entry.get("outputFormat", OutputFormat.JSON.value))
        try:
            output_format = OutputFormat(output)
        except ValueError:
            raise ValueError(f"Saved query '{title}' has unknown output format: {output!r}") from None

        return cls(title=title, query=query, output=output_format)


class ConfigLoader:
    """Loads saved query configuration files."""

    SAVED_QUERIES_FILE = "saved_queries.json"

    def __init__(self, config_dir: str = "configs"):
        self.config_dir = Path(config_dir)
        self.saved_queries_file = self.config_dir / self.SAVED_QUERIES_FILE

    def load_saved_queries(self) -> List[SavedQuery]:
        """
        Load all saved queries.

        Returns:
            Saved queries in file order; empty if the file does not exist

        Raises:
            ValueError: If the file is not a JSON list of valid records
        """
        if not self.saved_queries_file.exists():
            logger.debug(f"No saved queries file at {self.saved_queries_file}")
            return []

        with open(self.saved_queries_file, encoding="utf-8") as f:
            entries = json.load(f)

        if not isinstance(entries, list):
            raise ValueError(f"{self.saved_queries_file} must contain a JSON list of saved queries")

        return [SavedQuery.from_dict(entry) for entry in entries]


class DocumentLoader:
    """Loads JSON document text from files."""

    def __init__(self, base_dir: str = "."):
        self.base_dir = Path(base_dir)

    def load_text(self, path: str) -> str:
        """
        Read a document's text.

        Args:
            path: File path, relative to base_dir unless absolute

        Returns:
            File contents decoded as UTF-8 (a leading BOM is dropped)
        """
        document_file = self.base_dir / path
        if not document_file.exists():
            raise FileNotFoundError(f"Document not found: {path}")

        with open(document_file, encoding="utf-8-sig") as f:
            return f.read()
